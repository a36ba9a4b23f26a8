"""
Shared pytest fixtures for the hxbuild test suite.

Provides fixtures for:
- Isolated HXBUILD_HOME storage
- A fake `haxe` executable that mimics the compiler's CLI contract
- Source trees with a base build script
"""

import os
import socket
import stat
import sys
import textwrap
from pathlib import Path

import pytest

FAKE_HAXE = '''\
import os
import socket
import sys
from pathlib import Path


def log(entry):
    with open("haxe-calls.log", "a", encoding="utf-8") as f:
        f.write(entry + "\\n")


def compile_script(script):
    lines = [line.strip() for line in Path(script).read_text().splitlines() if line.strip()]
    if "#fail" in lines:
        print(f"{script}: error: forced failure", file=sys.stderr)
        return 2
    main = "?"
    for line in lines:
        if line.startswith("-main "):
            main = line.split(None, 1)[1]
    for line in lines:
        if line.startswith("-js "):
            target = Path(line.split(None, 1)[1])
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"compiled {main}\\n")
    print(f"compiled {main}")
    return 0


args = sys.argv[1:]
std = os.environ.get("HAXE_STD_PATH", "")
if args[0] == "--wait":
    log(f"wait {args[1]} std={std}")
    server = socket.socket()
    server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server.bind(("127.0.0.1", int(args[1])))
    server.listen()
    while True:
        conn, _ = server.accept()
        conn.close()
elif args[0] == "--connect":
    log(f"connect {args[1]} {args[2]}")
    sys.exit(compile_script(args[2]))
else:
    log(f"compile {args[0]} std={std}")
    sys.exit(compile_script(args[0]))
'''


@pytest.fixture
def mock_storage_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HXBUILD_HOME at a temp directory and clear HXBUILD_ variables.

    Also switches into an empty working directory so no project-local
    hxbuild.yaml or .env file leaks into the test.

    Returns:
        Path to temporary home directory
    """
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    for key in list(os.environ):
        if key.startswith("HXBUILD_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HXBUILD_HOME", str(home))
    monkeypatch.chdir(work)
    return home


@pytest.fixture
def source_root(tmp_path: Path) -> Path:
    """Source tree with a base build script writing build/out.tmp.

    Example:
        >>> def test_tree(source_root):
        ...     assert (source_root / "project.hxml").exists()
    """
    root = tmp_path / "project"
    (root / "Sources").mkdir(parents=True)
    (root / "Sources" / "Main.hx").write_text("class Main {}\n")
    (root / "project.hxml").write_text(
        textwrap.dedent(
            """\
            -cp Sources
            -main Main
            -js build/out.tmp
            -D analyzer-optimize
            """
        )
    )
    return root


@pytest.fixture
def fake_haxe_dir(tmp_path: Path) -> Path:
    """Compiler install directory holding a fake `haxe` executable and std/."""
    if sys.platform.startswith("win"):
        pytest.skip("fake compiler relies on a shebang script")

    install = tmp_path / "haxe"
    (install / "std").mkdir(parents=True)
    executable = install / "haxe"
    executable.write_text(f"#!{sys.executable}\n{FAKE_HAXE}")
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return install


@pytest.fixture
def free_port() -> int:
    """An unused TCP port on localhost."""
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def read_calls():
    """Return a reader for the invocations recorded by the fake compiler."""

    def _read(root: Path) -> list[str]:
        log = root / "haxe-calls.log"
        if not log.exists():
            return []
        return log.read_text().splitlines()

    return _read
