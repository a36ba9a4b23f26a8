"""Build pipeline: compile, publish, fan out.

Composes the compiler session, publisher, worker fan-out, scheduler and
source watcher into one-shot and watch-mode builds.

Contract:
- Inputs: BuildSettings
- Outputs: CompileOutcome per base compile
- Side Effects: Spawns compiler processes, renames artifacts,
  writes derived build scripts, watches the source tree
"""

import asyncio
import logging
from collections.abc import Awaitable
from collections.abc import Callable

from ..compiler.locator import CompilerLocator
from ..compiler.process import ProcessRunner
from ..compiler.server import CompilationServerSession
from ..config.settings import BuildSettings
from ..models import CompileOutcome
from ..models import CompileSpec
from ..models import FanoutReport
from .fanout import FanoutError
from .fanout import WorkerFanout
from .publisher import ArtifactPublisher
from .scheduler import CompileScheduler
from .watcher import SourceWatcher

logger = logging.getLogger(__name__)


class CompileError(RuntimeError):
    """Raised when a base compile exits unsuccessfully."""

    def __init__(self, outcome: CompileOutcome) -> None:
        self.outcome = outcome
        super().__init__(f"Haxe compiler error ({outcome.describe()}).")


class BuildPipeline:
    """Runs builds for one source tree.

    Example:
        >>> pipeline = BuildPipeline(load_config())
        >>> asyncio.run(pipeline.run(watch=False))
    """

    def __init__(
        self,
        settings: BuildSettings,
        runner: ProcessRunner | None = None,
    ) -> None:
        self.settings = settings
        self.spec = CompileSpec(
            source_root=settings.root,
            build_script=settings.build_script,
            temp_output=settings.temp_output,
            final_output=settings.final_output,
        )
        self.session = CompilationServerSession(
            CompilerLocator(settings.haxe_directory),
            runner or ProcessRunner(),
            settings.root,
            port=settings.port,
        )
        self.publisher = ArtifactPublisher(
            settings.root,
            self.spec.temp_output,
            self.spec.final_output,
            wait_attempts=settings.publish_wait_attempts,
            wait_delay=settings.publish_wait_delay,
        )
        self.fanout = WorkerFanout(
            settings.manifest_path,
            output_subdir=settings.worker_output_dir,
            output_extension=settings.worker_output_extension,
        )
        self.scheduler = CompileScheduler(self.connect_compile_cycle)
        self.watcher = SourceWatcher(settings.watch_paths(), self.scheduler.trigger)
        self.last_fanout: FanoutReport | None = None
        self._stopped: asyncio.Event | None = None

    async def _build(
        self, compile_script: Callable[[str], Awaitable[CompileOutcome]]
    ) -> tuple[CompileOutcome, FanoutReport]:
        report = FanoutReport()
        outcome = await compile_script(self.spec.build_script)
        try:
            if outcome.ok:
                await self.publisher.publish()
                report = await self.fanout.run(self.spec, compile_script)
        finally:
            self.last_fanout = report
            logger.info("Haxe compile end.")
        return outcome, report

    async def compile_once(self) -> FanoutReport:
        """Cold compile, publish and fan out.

        Raises:
            CompileError: If the base compile failed (nothing is published)
            FanoutError: If any worker compile failed
            FileNotFoundError: If the compiler output to publish is missing
        """
        outcome, report = await self._build(self.session.compile)
        if not outcome.ok:
            raise CompileError(outcome)
        if not report.ok:
            raise FanoutError(report)
        return report

    async def connect_compile_cycle(self) -> CompileOutcome:
        """One scheduled compile against the compilation server.

        Raises:
            CompileError: If the base compile failed
            FanoutError: If any worker compile failed
        """
        outcome, report = await self._build(self.session.connect_compile)
        if not outcome.ok:
            raise CompileError(outcome)
        if not report.ok:
            raise FanoutError(report)
        return outcome

    async def start_watching(self) -> None:
        """Initial build, then serve compiles from source changes.

        A failing initial build is logged; watching continues.
        """
        try:
            await self.compile_once()
        except (CompileError, FanoutError, FileNotFoundError) as e:
            logger.error(f"Initial build failed: {e}")

        await self.session.start()
        await self.session.wait_ready(self.settings.server_ready_timeout)
        self.watcher.start()

    async def run(self, watch: bool = False) -> None:
        """Build once, or keep building on changes until close()."""
        if not watch:
            await self.compile_once()
            return

        self._stopped = asyncio.Event()
        await self.start_watching()
        try:
            await self._stopped.wait()
        finally:
            self.close()
            await self.session.wait_closed()

    def close(self) -> None:
        """Stop watching and kill the compilation server.

        Compiles in flight are abandoned.
        """
        self.watcher.close()
        self.scheduler.close()
        self.session.close()
        if self._stopped is not None:
            self._stopped.set()
