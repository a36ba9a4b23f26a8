"""Haxe compilation server session.

Keeps one compiler running in `--wait <port>` mode so its parsed state stays
warm, and runs short-lived `--connect <port>` compiles against it. Each
connect compile is its own process and fails independently.

Contract:
- Inputs: Compiler locator, process runner, source root, port
- Outputs: CompileOutcome per compile
- Side Effects: Spawns and kills compiler processes
"""

import asyncio
import logging
from pathlib import Path

from ..models import CompileOutcome
from .locator import CompilerLocator
from .process import ProcessHandle
from .process import ProcessRunner

logger = logging.getLogger(__name__)

DEFAULT_PORT = 7000


class CompilationServerSession:
    """Owns the persistent compiler process and its port.

    Example:
        >>> session = CompilationServerSession(CompilerLocator(""), ProcessRunner(), Path("."))
        >>> async def run():
        ...     await session.start()
        ...     outcome = await session.connect_compile("project.hxml")
        ...     session.close()
    """

    def __init__(
        self,
        locator: CompilerLocator,
        runner: ProcessRunner,
        source_root: Path,
        port: int = DEFAULT_PORT,
    ) -> None:
        self.locator = locator
        self.runner = runner
        self.source_root = source_root
        self.port = port
        self._server: ProcessHandle | None = None
        self._monitor: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._server is not None and self._server.running

    async def _spawn(self, args: list[str]) -> ProcessHandle:
        compiler = self.locator.resolve()
        return await self.runner.run(compiler.executable, args, self.source_root, compiler.environment())

    async def start(self, port: int | None = None) -> None:
        """Launch the compiler in server mode.

        Idempotent while the server is running.
        """
        if self.running:
            logger.warning(f"Compilation server already running on port {self.port}")
            return

        if port is not None:
            self.port = port

        logger.info(f"Starting Haxe compilation server on port {self.port}")
        self._server = await self._spawn(["--wait", str(self.port)])
        self._monitor = asyncio.get_running_loop().create_task(self._watch_server(self._server))

    async def _watch_server(self, server: ProcessHandle) -> None:
        outcome = await server.wait()
        logger.info(f"Haxe compilation server stopped ({outcome.describe()}).")

    async def wait_ready(self, timeout: float = 5.0, interval: float = 0.05) -> bool:
        """Poll the server port until it accepts connections.

        Returns:
            True once the port accepts, False on timeout or if the server died
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                _, writer = await asyncio.open_connection("127.0.0.1", self.port)
            except OSError:
                if loop.time() >= deadline or (self._server is not None and not self._server.running):
                    logger.warning(f"Compilation server not reachable on port {self.port}")
                    return False
                await asyncio.sleep(interval)
                continue
            writer.close()
            await writer.wait_closed()
            return True

    async def connect_compile(self, build_script: str | Path) -> CompileOutcome:
        """Compile build_script against the running server."""
        handle = await self._spawn(["--connect", str(self.port), str(build_script)])
        return await handle.wait()

    async def compile(self, build_script: str | Path) -> CompileOutcome:
        """Cold one-shot compile that does not touch the server."""
        handle = await self._spawn([str(build_script)])
        return await handle.wait()

    def close(self) -> None:
        """Kill the server process. Safe to call when none is running."""
        if self._server is None:
            return
        self._server.kill()
        self._server = None

    async def wait_closed(self) -> None:
        """Wait until the last started server has exited and been logged."""
        if self._monitor is not None:
            await self._monitor
