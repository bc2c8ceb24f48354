"""
Incremental reader for a single tailed file.

A TailMonitor keeps one byte offset into the file. Every time its watcher says
the file changed it reopens the file, reads the bytes past that offset and
hands the decoded text to a reporter. The file is never held open between
reads, so the process writing it is never blocked.
"""

from __future__ import annotations

import codecs
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional, Union

from errors import TailReadError
from log_watcher import NotificationCallback, create_watcher
from models import FileError, FileWrite, InitialRead, Notification
from paths import resolve_watch_path
from reporter import Reporter

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Tail error: "

WatcherFactory = Callable[[Path, NotificationCallback], object]


class TailMonitor:
    """
    Emits only the text appended to ``file_path`` since the previous read.

    The watch is started before the initial read, so a write racing with
    construction may show up twice but is never lost.

    Args:
        reporter: Sink receiving initial contents, new text and error lines.
        file_path: File to tail; resolved to an absolute path.
        watcher_factory: ``factory(path, callback)`` returning an object with
            ``start()`` and ``stop()``. Defaults to the polling watcher.
        on_truncate: ``"reset"`` rereads a shrunken file from the start,
            ``"resync"`` jumps to its new end without reporting anything.
        on_read_error: ``"report"`` turns read failures into error lines,
            ``"raise"`` lets TailReadError propagate out of ``tell``.
    """

    def __init__(
        self,
        reporter: Reporter,
        file_path: Union[str, Path],
        watcher_factory: Optional[WatcherFactory] = None,
        *,
        on_truncate: str = "reset",
        on_read_error: str = "report",
    ):
        self._reporter = reporter
        self._file_path = resolve_watch_path(file_path)
        self._on_truncate = on_truncate
        self._on_read_error = on_read_error

        self.previous_length = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._lock = threading.RLock()

        factory = watcher_factory or create_watcher
        self._watcher = factory(self._file_path, self.tell)
        self._watcher.start()

        try:
            text = self.read_increment()
        except TailReadError as exc:
            if self._on_read_error == "raise":
                self._watcher.stop()
                raise
            self._report_read_error(exc)
        else:
            self.tell(InitialRead(str(self._file_path), text))

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def reporter(self) -> Reporter:
        return self._reporter

    def read_increment(self) -> str:
        """
        Read everything appended since the last call and advance the cursor.

        The file length is captured once from the open handle and both the read
        and the new cursor are bounded by it, so bytes written while reading
        are left for the next call.

        Raises:
            TailReadError: the file could not be opened or read.
        """
        with self._lock:
            try:
                with open(self._file_path, "rb") as fh:
                    length = os.fstat(fh.fileno()).st_size
                    if length < self.previous_length:
                        self._handle_shrink(length)
                        if self._on_truncate == "resync":
                            return ""
                    fh.seek(self.previous_length)
                    data = fh.read(length - self.previous_length)
            except OSError as exc:
                raise TailReadError(f"Could not read {self._file_path}", underlying=exc) from exc

            self.previous_length += len(data)
            return self._decoder.decode(data)

    def _handle_shrink(self, length: int) -> None:
        logger.warning(
            "%s shrank from %d to %d bytes (policy: %s)",
            self._file_path, self.previous_length, length, self._on_truncate,
        )
        self._decoder.reset()
        self.previous_length = 0 if self._on_truncate == "reset" else length

    def tell(self, message: Notification) -> None:
        """Handle one notification to completion; calls are serialized."""
        with self._lock:
            if isinstance(message, FileWrite):
                self.on_write(message.file_name)
            elif isinstance(message, FileError):
                self.on_error(message.file_name, message.reason)
            elif isinstance(message, InitialRead):
                self._reporter.report(message.text)
            else:
                logger.warning("Ignoring unknown message: %r", message)

    def on_write(self, file_name: str) -> None:
        try:
            text = self.read_increment()
        except TailReadError as exc:
            if self._on_read_error == "raise":
                raise
            self._report_read_error(exc)
            return
        if text:
            self._reporter.report(text)

    def on_error(self, file_name: str, reason: str) -> None:
        logger.debug("Watch error on %s: %s", file_name, reason)
        self._reporter.report(f"{ERROR_PREFIX}{reason}")

    def _report_read_error(self, exc: TailReadError) -> None:
        logger.error("%s", exc)
        self._reporter.report(f"{ERROR_PREFIX}{exc.reason}")

    def stop(self) -> None:
        """Release the watcher. Safe to call more than once."""
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            watcher.stop()
