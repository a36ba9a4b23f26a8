"""Async compiler process runner.

Spawns the compiler and streams its output to logging as it arrives.

Contract:
- Inputs: Executable, argument list, working directory, environment
- Outputs: ProcessHandle resolving to a CompileOutcome
- Side Effects: Spawns OS processes, writes log records
"""

import asyncio
import contextlib
import logging
import signal
from pathlib import Path

from ..models import CompileOutcome

logger = logging.getLogger(__name__)

# Compiler stdout/stderr lines are emitted here, not on the module logger
output_logger = logging.getLogger("hxbuild.compiler.output")


def outcome_from_returncode(returncode: int) -> CompileOutcome:
    """Translate a Popen-style return code (negative for signals)."""
    if returncode >= 0:
        return CompileOutcome(exit_code=returncode)
    try:
        name = signal.Signals(-returncode).name
    except ValueError:
        name = str(-returncode)
    return CompileOutcome(exit_code=None, signal=name)


class ProcessHandle:
    """A running compiler process.

    wait() resolves once the process has exited and both output streams
    are drained. kill() is safe to call at any time.
    """

    def __init__(self, process: asyncio.subprocess.Process, name: str) -> None:
        self._process = process
        self.name = name
        self._done = asyncio.get_running_loop().create_task(self._supervise())

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def running(self) -> bool:
        return not self._done.done()

    async def _pump(self, stream: asyncio.StreamReader | None, level: int) -> None:
        if stream is None:
            return
        while True:
            line = await stream.readline()
            if not line:
                break
            text = line.decode("utf-8", errors="replace").rstrip("\r\n")
            if text:
                output_logger.log(level, text)

    async def _supervise(self) -> CompileOutcome:
        await asyncio.gather(
            self._pump(self._process.stdout, logging.INFO),
            self._pump(self._process.stderr, logging.ERROR),
        )
        returncode = await self._process.wait()
        outcome = outcome_from_returncode(returncode)
        logger.debug(f"{self.name} (pid {self.pid}) exited: {outcome.describe()}")
        return outcome

    async def wait(self) -> CompileOutcome:
        return await asyncio.shield(self._done)

    def kill(self) -> None:
        if self._process.returncode is not None:
            return
        # The process may exit between the check and the signal
        with contextlib.suppress(ProcessLookupError):
            self._process.kill()


class ProcessRunner:
    """Spawns compiler processes.

    No retry happens at this layer; callers decide what a failure means.

    Example:
        >>> runner = ProcessRunner()
        >>> async def run():
        ...     handle = await runner.run("haxe", ["--version"], Path("."))
        ...     return await handle.wait()
    """

    async def run(
        self,
        executable: str,
        args: list[str],
        cwd: Path,
        env: dict[str, str] | None = None,
    ) -> ProcessHandle:
        """Start a process and return its handle.

        Raises:
            FileNotFoundError: If the executable cannot be found
        """
        logger.debug(f"Running {executable} {' '.join(args)} in {cwd}")
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(cwd),
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        return ProcessHandle(process, name=Path(executable).name)
