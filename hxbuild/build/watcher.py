"""Source tree watcher.

Bridges watchdog's observer thread onto the asyncio loop: every file
add/change/remove under the watched directories calls the change callback
on the loop thread. Paths with a dot-prefixed component are ignored.

Contract:
- Inputs: Directories to watch, change callback, event loop
- Outputs: Callback invocations on the loop thread
- Side Effects: Starts and stops a watchdog observer thread
"""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from pathlib import PurePath

from watchdog.events import EVENT_TYPE_CREATED
from watchdog.events import EVENT_TYPE_DELETED
from watchdog.events import EVENT_TYPE_MODIFIED
from watchdog.events import EVENT_TYPE_MOVED
from watchdog.events import FileSystemEvent
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)

WATCHED_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})


def is_hidden(path: str | PurePath) -> bool:
    """True if any component of path starts with a dot.

    Example:
        >>> is_hidden("Sources/.git/index")
        True
    """
    return any(part.startswith(".") and part not in (".", "..") for part in PurePath(path).parts)


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, on_change: Callable[[], object], loop: asyncio.AbstractEventLoop) -> None:
        self.on_change = on_change
        self.loop = loop

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in WATCHED_EVENT_TYPES:
            return
        if is_hidden(event.src_path):
            return
        logger.debug(f"Source {event.event_type}: {event.src_path}")
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.on_change)


class SourceWatcher:
    """Watches source directories and reports changes to the event loop."""

    def __init__(self, directories: list[Path], on_change: Callable[[], object]) -> None:
        self.directories = directories
        self.on_change = on_change
        self._observer: Observer | None = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        if self._observer is not None:
            logger.warning("Source watcher already running")
            return

        handler = _ChangeHandler(self.on_change, loop or asyncio.get_running_loop())
        observer = Observer()
        for directory in self.directories:
            if not directory.is_dir():
                logger.warning(f"Source directory not found, not watching: {directory}")
                continue
            observer.schedule(handler, str(directory), recursive=True)
            logger.info(f"Watching {directory}")
        observer.start()
        self._observer = observer

    def close(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join()
        self._observer = None
