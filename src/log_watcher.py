# src/log_watcher.py
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple
import logging

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from errors import WatchError
from models import FileError, FileWrite, Notification

logger = logging.getLogger(__name__)

NotificationCallback = Callable[[Notification], None]


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class PollingFileWatcher:
    """
    Polls a file and calls `on_notification(...)` with FileWrite whenever its
    size or modification time changes, or FileError when it becomes unreadable.
    No event is emitted for the state found at start.
    """
    def __init__(self, path: Path, on_notification: NotificationCallback, poll_interval: float = 0.5):
        self.path = Path(path)
        self.on_notification = on_notification
        self.poll = poll_interval
        self._stop = threading.Event()
        self._thread = None
        self._last: Optional[Tuple[int, int, int]] = None
        self._failed = False

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        # baseline is taken before returning so no change after start() is missed
        try:
            self._last = self._signature()
            self._failed = False
        except OSError as e:
            # the monitor's own initial read surfaces this one
            logger.debug("Initial stat of %s failed: %s", self.path, e)
            self._last = None
            self._failed = True
        self._thread = threading.Thread(
            target=self._run, name=f"tailwatch-poll-{self.path.name}", daemon=True
        )
        self._thread.start()
        logger.info("Started watching %s", self.path)

    def stop(self):
        self._stop.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=1)
        logger.info("Stopped watching %s", self.path)

    def _signature(self) -> Tuple[int, int, int]:
        st = os.stat(self.path)
        return st.st_size, st.st_mtime_ns, st.st_ino

    def _emit(self, notification: Notification) -> None:
        try:
            self.on_notification(notification)
        except Exception:
            logger.exception("Notification handler failed for %s", self.path)

    def _run(self):
        name = str(self.path)
        while not self._stop.wait(self.poll):
            try:
                current = self._signature()
            except OSError as e:
                if not self._failed:
                    self._failed = True
                    logger.warning("Cannot access %s: %s", self.path, e)
                    self._emit(FileError(name, _reason(e)))
                continue

            if self._failed:
                self._failed = False
                logger.info("%s is accessible again", self.path)
                self._last = current
                self._emit(FileWrite(name))
            elif current != self._last:
                self._last = current
                self._emit(FileWrite(name))


class _WatchedFileHandler(FileSystemEventHandler):
    """Filters directory events down to the one watched file."""

    def __init__(self, watcher: "WatchdogFileWatcher"):
        super().__init__()
        self._watcher = watcher

    def _is_target(self, raw_path) -> bool:
        if not raw_path:
            return False
        return Path(os.fsdecode(raw_path)) == self._watcher.path

    def on_modified(self, event):
        if not event.is_directory and self._is_target(event.src_path):
            self._watcher._emit(FileWrite(str(self._watcher.path)))

    def on_created(self, event):
        if not event.is_directory and self._is_target(event.src_path):
            self._watcher._emit(FileWrite(str(self._watcher.path)))

    def on_deleted(self, event):
        if not event.is_directory and self._is_target(event.src_path):
            self._watcher._emit(FileError(str(self._watcher.path), "file was deleted"))

    def on_moved(self, event):
        if event.is_directory:
            return
        if self._is_target(event.src_path):
            self._watcher._emit(FileError(str(self._watcher.path), "file was moved away"))
        elif self._is_target(getattr(event, "dest_path", None)):
            self._watcher._emit(FileWrite(str(self._watcher.path)))


class WatchdogFileWatcher:
    """
    Watches a file through the OS notification API exposed by watchdog.

    watchdog observes directories, so the parent directory is scheduled and
    events for other entries are discarded.
    """

    def __init__(self, path: Path, on_notification: NotificationCallback):
        self.path = Path(path)
        self.on_notification = on_notification
        self._observer = None

    def start(self):
        if self._observer is not None and self._observer.is_alive():
            return
        observer = Observer()
        try:
            observer.schedule(_WatchedFileHandler(self), str(self.path.parent), recursive=False)
            observer.start()
        except OSError as e:
            logger.error("Could not start watchdog observer for %s: %s", self.path, e)
            self._emit(FileError(str(self.path), _reason(e)))
            return
        self._observer = observer
        logger.info("Started watching %s (watchdog)", self.path)

    def stop(self):
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=1)
        self._observer = None
        logger.info("Stopped watching %s", self.path)

    def _emit(self, notification: Notification) -> None:
        try:
            self.on_notification(notification)
        except Exception:
            logger.exception("Notification handler failed for %s", self.path)


_BACKENDS = {
    "polling": PollingFileWatcher,
    "watchdog": WatchdogFileWatcher,
}


def create_watcher(
    path: Path,
    on_notification: NotificationCallback,
    *,
    backend: str = "polling",
    poll_interval: float = 0.5,
):
    """Build an unstarted watcher of the named backend."""
    try:
        cls = _BACKENDS[backend]
    except KeyError:
        raise WatchError(
            f"Unknown watcher backend '{backend}'. Expected one of: {', '.join(_BACKENDS)}"
        ) from None
    if cls is PollingFileWatcher:
        return cls(path, on_notification, poll_interval=poll_interval)
    return cls(path, on_notification)
