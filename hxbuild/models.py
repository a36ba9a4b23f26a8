"""Shared data models for hxbuild.

This module defines data structures used across the compiler and build layers.

Contract:
- Inputs: Raw data for model construction
- Outputs: Immutable model instances
- Side Effects: None (pure data structures)
"""

from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from enum import Enum
from pathlib import Path


class SchedulerState(str, Enum):
    """Compile scheduler state.

    State transitions:
    - IDLE -> COMPILING: trigger() while nothing is running
    - COMPILING -> IDLE: the running compile finished (success, failure or
      cancellation)
    """

    IDLE = "idle"
    COMPILING = "compiling"


@dataclass(frozen=True)
class CompileOutcome:
    """Result of one compiler process.

    Attributes:
        exit_code: Process exit status (None when killed by a signal)
        signal: Name of the terminating signal, if any

    Example:
        >>> CompileOutcome(exit_code=0).ok
        True
        >>> CompileOutcome(exit_code=None, signal="SIGKILL").ok
        False
    """

    exit_code: int | None
    signal: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def describe(self) -> str:
        if self.signal is not None:
            return f"killed by {self.signal}"
        return f"exit code {self.exit_code}"


@dataclass(frozen=True)
class CompileSpec:
    """Immutable description of one compile invocation.

    Attributes:
        source_root: Working directory of the compiler
        build_script: Build script path, relative to source_root
        temp_output: Compiler output path to rename after success
        final_output: Destination of that rename

    Example:
        >>> spec = CompileSpec(Path("/src"), "project.hxml", "out.tmp", "out.js")
        >>> spec.derive("temp-Worker.hxml").final_output is None
        True
    """

    source_root: Path
    build_script: str
    temp_output: str | None = None
    final_output: str | None = None

    @property
    def script_path(self) -> Path:
        return self.source_root / self.build_script

    @property
    def publishes(self) -> bool:
        """Whether a successful compile renames its output."""
        return bool(self.temp_output and self.final_output) and self.final_output != self.temp_output

    def derive(self, build_script: str) -> "CompileSpec":
        """Copy for a derived script. Derived compiles never publish."""
        return replace(self, build_script=build_script, temp_output=None, final_output=None)


@dataclass(frozen=True)
class WorkerResult:
    """Outcome of one worker compile."""

    worker: str
    script: Path
    outcome: CompileOutcome


@dataclass
class FanoutReport:
    """Aggregated worker compile results, in manifest order."""

    results: list[WorkerResult] = field(default_factory=list)

    @property
    def workers(self) -> list[str]:
        return [result.worker for result in self.results]

    @property
    def failed(self) -> list[WorkerResult]:
        return [result for result in self.results if not result.outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed
