import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


class RecordingReporter:
    """Collects every reported chunk in order."""

    def __init__(self, events=None):
        self.texts = []
        self._events = events

    def report(self, text):
        self.texts.append(text)
        if self._events is not None:
            self._events.append(("report", text))


class FakeWatcher:
    """Watcher stand-in; tests push notifications through `emit`."""

    def __init__(self, path, on_notification, events=None):
        self.path = path
        self.on_notification = on_notification
        self.started = False
        self.stop_calls = 0
        self._events = events

    def start(self):
        self.started = True
        if self._events is not None:
            self._events.append(("watch_started", None))

    def stop(self):
        self.stop_calls += 1

    def emit(self, notification):
        self.on_notification(notification)


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def watchers():
    return []


@pytest.fixture
def watcher_factory(watchers):
    def factory(path, on_notification):
        watcher = FakeWatcher(path, on_notification)
        watchers.append(watcher)
        return watcher
    return factory


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "app.log"
    path.write_bytes(b"hello\n")
    return path
