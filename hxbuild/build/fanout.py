"""Worker fan-out.

After a successful base compile, every worker listed in the worker manifest
is compiled from a derived copy of the base build script. Each worker gets
its own script file and worker compiles run one after another, so no compile
ever reads a script that another worker is rewriting.

Contract:
- Inputs: Base build script, worker manifest, compile function
- Outputs: FanoutReport with one result per worker
- Side Effects: Writes temp-<worker>.hxml files into the source root
"""

import hashlib
import logging
import re
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path

from ..compiler.hxml import BuildScript
from ..models import CompileOutcome
from ..models import CompileSpec
from ..models import FanoutReport
from ..models import WorkerResult

logger = logging.getLogger(__name__)

ScriptCompiler = Callable[[str], Awaitable[CompileOutcome]]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FanoutError(RuntimeError):
    """Raised when one or more worker compiles failed."""

    def __init__(self, report: FanoutReport) -> None:
        self.report = report
        failed = ", ".join(result.worker for result in report.failed)
        super().__init__(f"Worker compile failed: {failed}")


def parse_worker_manifest(text: str) -> list[str]:
    """Parse a worker manifest into distinct worker ids, in file order.

    Example:
        >>> parse_worker_manifest("a\\n\\nb\\n")
        ['a', 'b']
    """
    workers: list[str] = []
    for line in text.splitlines():
        worker = line.strip()
        if worker and worker not in workers:
            workers.append(worker)
    return workers


def worker_script_name(worker: str) -> str:
    """File name of the derived build script for worker.

    Identifiers that need escaping get a digest of the raw identifier
    appended, so distinct workers never share a script file.

    Example:
        >>> worker_script_name("workers.Physics")
        'temp-workers.Physics.hxml'
    """
    safe = _UNSAFE_FILENAME_CHARS.sub("_", worker)
    if safe != worker:
        digest = hashlib.sha1(worker.encode("utf-8")).hexdigest()[:8]
        safe = f"{safe}-{digest}"
    return f"temp-{safe}.hxml"


class WorkerFanout:
    """Compiles manifest workers from derived build scripts.

    The manifest is read on every run so edits apply to the next compile.
    """

    def __init__(
        self,
        manifest_path: Path,
        output_subdir: str = "html5",
        output_extension: str = "js",
    ) -> None:
        self.manifest_path = manifest_path
        self.output_subdir = output_subdir
        self.output_extension = output_extension

    def load_workers(self) -> list[str]:
        if not self.manifest_path.is_file():
            return []
        return parse_worker_manifest(self.manifest_path.read_text(encoding="utf-8"))

    def derive(self, base: CompileSpec, worker: str) -> CompileSpec:
        """Write the derived script for worker and return its compile spec."""
        spec = base.derive(worker_script_name(worker))
        script = BuildScript.load(base.script_path).for_worker(worker, self.output_subdir, self.output_extension)
        script.write(spec.script_path)
        return spec

    async def run(self, base: CompileSpec, compile_script: ScriptCompiler) -> FanoutReport:
        """Compile every worker of the manifest.

        A failing worker is logged and the remaining workers still compile.

        Args:
            base: Compile spec of the base compile that just succeeded
            compile_script: Compiles a script path relative to the source root

        Returns:
            Report of all worker outcomes (empty when there is no manifest)
        """
        report = FanoutReport()
        workers = self.load_workers()
        if not workers:
            return report

        logger.info(f"Compiling {len(workers)} worker(s): {', '.join(workers)}")
        for worker in workers:
            spec = self.derive(base, worker)
            outcome = await compile_script(spec.build_script)
            if not outcome.ok:
                logger.error(f"Worker {worker} failed: {outcome.describe()}")
            report.results.append(WorkerResult(worker=worker, script=spec.script_path, outcome=outcome))

        return report
