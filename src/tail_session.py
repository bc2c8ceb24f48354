"""Lifetime management for one watcher + monitor + reporter triple."""

from __future__ import annotations

import functools
import logging
import threading
from pathlib import Path
from typing import Optional, Union

from log_watcher import create_watcher
from models import TailConfig
from reporter import Reporter
from tail_monitor import TailMonitor

logger = logging.getLogger(__name__)


class TailSession:
    """
    Starts a TailMonitor configured from a TailConfig and stops it on demand.

    Usable as a context manager::

        with TailSession("app.log", ConsoleReporter()) as session:
            session.wait()
    """

    def __init__(
        self,
        path: Union[str, Path],
        reporter: Reporter,
        config: Optional[TailConfig] = None,
    ):
        self.path = path
        self.reporter = reporter
        self.config = config or TailConfig()
        self.config.validate()
        self.monitor: Optional[TailMonitor] = None
        self._stopped = threading.Event()

    def start(self) -> TailMonitor:
        if self.monitor is not None:
            return self.monitor
        self._stopped.clear()
        factory = functools.partial(
            create_watcher,
            backend=self.config.backend,
            poll_interval=self.config.poll_interval,
        )
        self.monitor = TailMonitor(
            self.reporter,
            self.path,
            factory,
            on_truncate=self.config.on_truncate,
            on_read_error=self.config.on_read_error,
        )
        logger.info(
            "Tailing %s with %s backend", self.monitor.file_path, self.config.backend
        )
        return self.monitor

    def stop(self) -> None:
        if self.monitor is not None:
            self.monitor.stop()
            self.monitor = None
        self._stopped.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until ``stop()`` is called. Returns False on timeout."""
        return self._stopped.wait(timeout)

    @property
    def running(self) -> bool:
        return self.monitor is not None

    def __enter__(self) -> "TailSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
