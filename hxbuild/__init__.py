"""hxbuild: low-latency Haxe builds through a persistent compilation server.

Public Interface:
    Modules:
    - config: Configuration loading
    - models: Shared data structures
    - compiler: Compiler location, processes and server session
    - build: Scheduling, publishing, worker fan-out and watching
"""

from .models import CompileOutcome
from .models import CompileSpec
from .models import FanoutReport
from .models import SchedulerState

__version__ = "0.1.0"

__all__ = [
    "CompileOutcome",
    "CompileSpec",
    "FanoutReport",
    "SchedulerState",
]
