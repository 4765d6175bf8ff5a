"""File watcher with debounce that reports changes to a single document."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class _DebouncedHandler(FileSystemEventHandler):
    """Fires the callback for events on ``target`` once a burst has settled.

    Each matching event restarts the quiet-period timer, so the callback sees
    the file after the last write of a burst (truncate then write, temp file
    then rename). With no debounce the callback runs on the observer thread.
    """

    def __init__(
        self,
        target: Path,
        debounce_seconds: float,
        callback: Callable[[Path], None],
    ) -> None:
        super().__init__()
        self._target = target
        self._debounce = debounce_seconds
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None

    def _matches(self, event: FileSystemEvent) -> bool:
        paths = [event.src_path, getattr(event, "dest_path", "") or ""]
        return any(p and Path(p).resolve() == self._target for p in paths)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or not self._matches(event):
            return

        if self._debounce <= 0:
            self._fire()
            return

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self._debounce, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def cancel(self) -> None:
        """Drop a pending callback, if any."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        try:
            self._callback(self._target)
        except Exception:
            logger.exception("Watcher callback failed for %s", self._target)


class DocumentWatcher:
    """Watches one file and calls ``callback(path)`` when it changes.

    The parent directory is observed so editor save patterns (temp file +
    rename) are still seen. The callback runs on a background thread.
    """

    def __init__(
        self,
        path: Path,
        callback: Callable[[Path], None],
        debounce_seconds: float = 0.5,
    ) -> None:
        self._path = Path(path).resolve()
        self._observer: Observer | None = None
        self._handler = _DebouncedHandler(
            target=self._path,
            debounce_seconds=debounce_seconds,
            callback=callback,
        )

    @property
    def path(self) -> Path:
        return self._path

    def start(self) -> None:
        """Begin watching the file's directory."""
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(self._handler, str(self._path.parent), recursive=False)
        self._observer.start()
        logger.info("Watching %s for changes", self._path)

    def stop(self) -> None:
        """Stop watching and clean up."""
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        self._handler.cancel()
        logger.info("Stopped watching %s", self._path)
