"""Unit tests for build script parsing and worker derivation."""

from pathlib import Path

import pytest

from hxbuild.compiler.hxml import BuildScript
from hxbuild.compiler.hxml import directive_name
from hxbuild.compiler.hxml import worker_output_path

BASE = """\
-cp Sources
-main Main
-lib kha
-js build/html5/kha.js
-D analyzer-optimize
"""


@pytest.mark.unit
class TestBuildScript:
    """Test build script parsing and worker derivation."""

    def test_parse_drops_blank_lines_and_whitespace(self) -> None:
        """Test parse strips lines and drops blanks."""
        script = BuildScript.parse("-cp Sources\r\n\n  -main Main  \n")

        assert script.lines == ("-cp Sources", "-main Main")

    def test_directive_name(self) -> None:
        """Test the directive name is the first token."""
        assert directive_name("-js out.js") == "-js"
        assert directive_name("--connect 7000") == "--connect"
        assert directive_name("") == ""

    def test_for_worker_replaces_entry_point_and_output(self) -> None:
        """Test worker derivation swaps entry point and JS output."""
        derived = BuildScript.parse(BASE).for_worker("w")

        assert derived.lines == (
            "-cp Sources",
            "-lib kha",
            "-D analyzer-optimize",
            "-main w",
            "-js html5/w.js",
        )

    def test_for_worker_handles_long_directive_forms(self) -> None:
        """Test long and short directive spellings are both removed."""
        base = BuildScript.parse("--main Main\n-m Other\n--js out.js\n-cp src\n")

        assert base.for_worker("w").lines == ("-cp src", "-main w", "-js html5/w.js")

    def test_for_worker_keeps_similar_directives(self) -> None:
        """Test directives that only share a prefix are kept."""
        base = BuildScript.parse("-main Main\n-js out.js\n--json types.json\n-D js-es=6\n")

        derived = base.for_worker("w")

        assert "--json types.json" in derived.lines
        assert "-D js-es=6" in derived.lines

    def test_derivation_does_not_mutate_base(self) -> None:
        """Test derivation returns a new script."""
        base = BuildScript.parse(BASE)

        base.for_worker("a")
        base.for_worker("b")

        assert base == BuildScript.parse(BASE)

    def test_custom_output_location(self) -> None:
        """Test worker output subdirectory and extension."""
        derived = BuildScript.parse(BASE).for_worker("physics.Worker", subdir="workers", extension="mjs")

        assert derived.lines[-1] == "-js workers/physics.Worker.mjs"
        assert worker_output_path("w", "out", "js") == "out/w.js"

    def test_write_and_load_round_trip(self, tmp_path: Path) -> None:
        """Test a written script loads back unchanged."""
        path = BuildScript.parse(BASE).for_worker("w").write(tmp_path / "temp-w.hxml")

        assert path.read_text().endswith("-js html5/w.js\n")
        assert BuildScript.load(path).lines[-2:] == ("-main w", "-js html5/w.js")
