"""Build script (.hxml) handling.

A build script is an ordered list of directive lines. Only the entry-point
and JavaScript output directives are interpreted; every other line is kept
verbatim.

Contract:
- Inputs: .hxml text or file paths
- Outputs: Immutable BuildScript instances
- Side Effects: write() creates or overwrites a file
"""

from dataclasses import dataclass
from pathlib import Path
from pathlib import PurePosixPath

ENTRY_POINT_DIRECTIVES = frozenset({"-main", "--main", "-m"})
JS_OUTPUT_DIRECTIVES = frozenset({"-js", "--js"})


def directive_name(line: str) -> str:
    """First token of a directive line ("" for blank lines).

    Example:
        >>> directive_name("-main Main")
        '-main'
    """
    parts = line.split(maxsplit=1)
    return parts[0] if parts else ""


def worker_output_path(worker: str, subdir: str = "html5", extension: str = "js") -> str:
    """Output target of a worker artifact.

    Example:
        >>> worker_output_path("w")
        'html5/w.js'
    """
    return str(PurePosixPath(subdir) / f"{worker}.{extension}")


@dataclass(frozen=True)
class BuildScript:
    """Read-only snapshot of a build script.

    Example:
        >>> script = BuildScript.parse("-cp Sources\\n-main Main\\n-js out.js\\n")
        >>> script.for_worker("w").lines
        ('-cp Sources', '-main w', '-js html5/w.js')
    """

    lines: tuple[str, ...]

    @classmethod
    def parse(cls, text: str) -> "BuildScript":
        return cls(tuple(line.strip() for line in text.splitlines() if line.strip()))

    @classmethod
    def load(cls, path: Path) -> "BuildScript":
        return cls.parse(path.read_text(encoding="utf-8"))

    def without(self, names: frozenset[str]) -> "BuildScript":
        return BuildScript(tuple(line for line in self.lines if directive_name(line) not in names))

    def with_lines(self, *lines: str) -> "BuildScript":
        return BuildScript(self.lines + lines)

    def for_worker(self, worker: str, subdir: str = "html5", extension: str = "js") -> "BuildScript":
        """Derive the script compiling worker as its own entry point."""
        return self.without(ENTRY_POINT_DIRECTIVES | JS_OUTPUT_DIRECTIVES).with_lines(
            f"-main {worker}",
            f"-js {worker_output_path(worker, subdir, extension)}",
        )

    def render(self) -> str:
        return "\n".join(self.lines) + "\n"

    def write(self, path: Path) -> Path:
        path.write_text(self.render(), encoding="utf-8")
        return path
