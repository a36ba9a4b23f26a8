"""Compiler process management for hxbuild.

Contract:
- Inputs: Compiler install directory, build scripts
- Outputs: CompileOutcome per compiler invocation
- Side Effects: Spawns compiler processes, writes derived build scripts
"""

from .hxml import BuildScript
from .locator import CompilerLocator
from .locator import ResolvedCompiler
from .process import ProcessHandle
from .process import ProcessRunner
from .server import CompilationServerSession

__all__ = [
    "BuildScript",
    "CompilerLocator",
    "ResolvedCompiler",
    "ProcessHandle",
    "ProcessRunner",
    "CompilationServerSession",
]
