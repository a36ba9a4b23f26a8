"""Build orchestration for hxbuild.

Public Interface:
    - BuildPipeline: One-shot and watch-mode builds
    - CompileScheduler: Coalescing compile state machine
    - WorkerFanout: Derived worker compiles
    - ArtifactPublisher: Temp output promotion
    - SourceWatcher: Filesystem change notifications
    - CompileError, FanoutError: Build failures
"""

from .fanout import FanoutError
from .fanout import WorkerFanout
from .fanout import parse_worker_manifest
from .pipeline import BuildPipeline
from .pipeline import CompileError
from .publisher import ArtifactPublisher
from .scheduler import CompileScheduler
from .watcher import SourceWatcher

__all__ = [
    "BuildPipeline",
    "CompileScheduler",
    "WorkerFanout",
    "parse_worker_manifest",
    "ArtifactPublisher",
    "SourceWatcher",
    "CompileError",
    "FanoutError",
]
