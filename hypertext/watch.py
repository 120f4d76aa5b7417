from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .config import SiteConfig

# Reads during a build raise "opened"/"closed" events; only real changes count.
CHANGE_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class RebuildHandler(FileSystemEventHandler):
    """Runs ``rebuild`` once a burst of changes has been quiet for DEBOUNCE_DELAY seconds.

    Every change rearms the timer, so the rebuild always sees the last write of a
    burst. Rebuilds never overlap; a change made during one schedules the next.
    """

    DEBOUNCE_DELAY = 0.2

    def __init__(
        self,
        rebuild: Callable[[], None],
        delay: Optional[float] = None,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        super().__init__()
        self.rebuild = rebuild
        self.delay = self.DEBOUNCE_DELAY if delay is None else delay
        self.timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._rebuild_lock = threading.Lock()

    def should_rebuild(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in CHANGE_EVENTS:
            return False
        return not Path(str(event.src_path)).name.startswith(".")

    def on_any_event(self, event: FileSystemEvent) -> None:
        if self.should_rebuild(event):
            self.schedule()

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = self.timer_factory(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        with self._lock:
            if self._timer is threading.current_thread():
                self._timer = None
        with self._rebuild_lock:
            self.rebuild()


def watched_dirs(config: SiteConfig) -> list[Path]:
    dirs = [config.content_dir, config.templates_dir, config.static_dir, config.styles_dir]
    return [path for path in dirs if path.is_dir()]


def start_watcher(config: SiteConfig, rebuild: Callable[[], None]) -> tuple[Observer, RebuildHandler]:
    handler = RebuildHandler(rebuild)
    observer = Observer()
    for path in watched_dirs(config):
        observer.schedule(handler, str(path), recursive=True)
        print(f"Watching {path} for changes...")
    observer.start()
    return observer, handler
