"""Compiler executable resolution.

Decides which haxe executable to run and which environment overrides it needs.

Search order:
1. haxe<platform-suffix> inside the install directory
2. haxe inside the install directory
3. haxe from PATH

Contract:
- Inputs: Install directory path, platform information
- Outputs: ResolvedCompiler (executable + environment overrides)
- Side Effects: None (os.environ is never modified)
"""

import logging
import os
import platform
import sys
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "haxe"
STD_PATH_VARIABLE = "HAXE_STD_PATH"


def platform_suffix(system: str | None = None, machine: str | None = None) -> str:
    """Suffix of the platform-specific executable name.

    Args:
        system: sys.platform value (default: current platform)
        machine: platform.machine() value (default: current machine)

    Returns:
        Suffix such as ".exe", "-osx", "-linux64"

    Example:
        >>> platform_suffix("linux", "x86_64")
        '-linux64'
    """
    system = system or sys.platform
    machine = (machine or platform.machine()).lower()

    if system.startswith("win"):
        return ".exe"
    if system == "darwin":
        return "-osx"
    if system.startswith("linux"):
        if machine in ("aarch64", "arm64"):
            return "-linuxarm64"
        if machine.startswith("arm"):
            return "-linuxarm"
        if machine in ("x86_64", "amd64"):
            return "-linux64"
        return "-linux32"
    return ""


@dataclass(frozen=True)
class ResolvedCompiler:
    """Executable and environment overrides to spawn the compiler with."""

    executable: str
    env_overrides: dict[str, str] = field(default_factory=dict)

    def environment(self, base: dict[str, str] | None = None) -> dict[str, str]:
        """Merge overrides into a copy of base (default: os.environ)."""
        env = dict(os.environ if base is None else base)
        env.update(self.env_overrides)
        return env


class CompilerLocator:
    """Resolves the compiler from a configured install directory.

    Example:
        >>> locator = CompilerLocator("")
        >>> locator.resolve().executable
        'haxe'
    """

    def __init__(self, install_dir: str | Path | None, suffix: str | None = None) -> None:
        self.install_dir = Path(install_dir) if install_dir else None
        self.suffix = platform_suffix() if suffix is None else suffix

    def resolve(self) -> ResolvedCompiler:
        if self.install_dir is None or not self.install_dir.is_dir():
            return ResolvedCompiler(EXECUTABLE_NAME)

        executable = EXECUTABLE_NAME
        for candidate in (EXECUTABLE_NAME + self.suffix, EXECUTABLE_NAME):
            path = (self.install_dir / candidate).resolve()
            if path.exists():
                executable = str(path)
                break

        env_overrides = {}
        std_dir = (self.install_dir / "std").resolve()
        if std_dir.is_dir():
            env_overrides[STD_PATH_VARIABLE] = str(std_dir)

        logger.debug(f"Resolved compiler {executable} (std: {env_overrides.get(STD_PATH_VARIABLE)})")
        return ResolvedCompiler(executable, env_overrides)
