"""Compile scheduler.

Coalesces change notifications into a bounded stream of compiles:
at most one compile runs at a time, and any number of triggers that arrive
while it runs collapse into exactly one follow-up compile.

Contract:
- Inputs: trigger() calls from watchers or one-shot requests
- Outputs: asyncio tasks resolving to CompileOutcome
- Side Effects: Runs the configured compile function
"""

import asyncio
import logging
from collections.abc import Awaitable
from collections.abc import Callable

from ..models import CompileOutcome
from ..models import SchedulerState

logger = logging.getLogger(__name__)

CompileFunction = Callable[[], Awaitable[CompileOutcome]]


class CompileScheduler:
    """Two-state compile scheduler.

    State is only touched from the event loop thread, so transitions are
    atomic with respect to each other.

    Attributes:
        state: IDLE or COMPILING
        pending: A trigger arrived during the current compile
        compiles_started: Number of compiles started so far

    Example:
        >>> scheduler = CompileScheduler(pipeline.connect_compile_cycle)
        >>> task = scheduler.trigger()      # starts a compile
        >>> scheduler.trigger() is None     # coalesced into one follow-up
        True
    """

    def __init__(self, compile_fn: CompileFunction) -> None:
        self._compile_fn = compile_fn
        self.state = SchedulerState.IDLE
        self.pending = False
        self.compiles_started = 0
        self._current: asyncio.Task | None = None
        self._closed = False

    @property
    def is_compiling(self) -> bool:
        return self.state is SchedulerState.COMPILING

    def trigger(self) -> asyncio.Task | None:
        """Request a compile.

        Returns:
            The started compile task, or None if the request was folded
            into the follow-up of the compile already running, or the
            scheduler is closed
        """
        if self._closed:
            return None
        if self.state is SchedulerState.COMPILING:
            self.pending = True
            return None

        self.state = SchedulerState.COMPILING
        self.pending = False
        self.compiles_started += 1
        task = asyncio.get_running_loop().create_task(self._run())
        task.add_done_callback(self._report)
        self._current = task
        return task

    async def _run(self) -> CompileOutcome:
        try:
            result = await self._compile_fn()
        except asyncio.CancelledError:
            # Abandoned compiles owe no follow-up
            self.state = SchedulerState.IDLE
            self.pending = False
            raise
        except Exception:
            self._finish()
            raise
        self._finish()
        return result

    def _finish(self) -> None:
        self.state = SchedulerState.IDLE
        if self.pending:
            self.pending = False
            self.trigger()

    def _report(self, task: asyncio.Task) -> None:
        if task.cancelled():
            logger.debug("Compile task cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Compile failed: {error}")

    async def drain(self) -> None:
        """Wait until no compile is running and none is owed.

        Errors of the awaited compiles are reported by the scheduler itself.
        """
        while self._current is not None and not self._current.done():
            await asyncio.wait([self._current])

    def close(self) -> None:
        """Abandon the running compile and any follow-up it owes.

        Later triggers are ignored.
        """
        self._closed = True
        self.pending = False
        if self._current is not None and not self._current.done():
            self._current.cancel()
