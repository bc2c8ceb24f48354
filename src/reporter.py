"""Downstream sinks that receive the text produced by a TailMonitor."""

from __future__ import annotations

import sys
import threading
from typing import Optional, Protocol, TextIO


class Reporter(Protocol):
    def report(self, text: str) -> None:
        ...


class ConsoleReporter:
    """Writes reported text to a stream as-is, without adding newlines."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # resolved lazily so a redirected sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def report(self, text: str) -> None:
        with self._lock:
            self.stream.write(text)
            self.stream.flush()


__all__ = ["Reporter", "ConsoleReporter"]
