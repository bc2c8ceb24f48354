import logging
import sys
import threading
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from errors import WatchError  # noqa: E402
from log_watcher import (  # noqa: E402
    PollingFileWatcher,
    WatchdogFileWatcher,
    _WatchedFileHandler,
    create_watcher,
)
from models import FileError, FileWrite  # noqa: E402


class Collector:
    def __init__(self):
        self.items = []
        self._cond = threading.Condition()

    def __call__(self, notification):
        with self._cond:
            self.items.append(notification)
            self._cond.notify_all()

    def wait_for(self, count, timeout=3.0):
        with self._cond:
            return self._cond.wait_for(lambda: len(self.items) >= count, timeout)


@pytest.fixture
def polling(log_file):
    collector = Collector()
    watcher = PollingFileWatcher(log_file, collector, poll_interval=0.02)
    watcher.start()
    yield watcher, collector
    watcher.stop()


def test_polling_emits_nothing_without_changes(polling):
    _, collector = polling
    assert not collector.wait_for(1, timeout=0.2)


def test_polling_emits_write_on_append(polling, log_file):
    _, collector = polling
    with log_file.open("ab") as f:
        f.write(b"more\n")

    assert collector.wait_for(1)
    assert collector.items[0] == FileWrite(str(log_file))


def test_polling_emits_single_error_then_write_on_recovery(polling, log_file):
    _, collector = polling
    log_file.unlink()

    assert collector.wait_for(1)
    assert isinstance(collector.items[0], FileError)
    assert collector.items[0].file_name == str(log_file)
    assert collector.items[0].reason

    # no repeated errors while the file stays missing
    assert not collector.wait_for(2, timeout=0.2)

    log_file.write_bytes(b"back\n")
    assert collector.wait_for(2)
    assert collector.items[1] == FileWrite(str(log_file))


def test_polling_survives_failing_callback(log_file):
    calls = []

    def explode(notification):
        calls.append(notification)
        raise RuntimeError("boom")

    watcher = PollingFileWatcher(log_file, explode, poll_interval=0.02)
    watcher.start()
    try:
        with log_file.open("ab") as f:
            f.write(b"a\n")
        done = threading.Event()
        for _ in range(150):
            if calls:
                break
            done.wait(0.02)
        with log_file.open("ab") as f:
            f.write(b"b\n")
        for _ in range(150):
            if len(calls) >= 2:
                break
            done.wait(0.02)
    finally:
        watcher.stop()

    assert len(calls) >= 2


def test_polling_start_is_idempotent(log_file):
    watcher = PollingFileWatcher(log_file, lambda n: None, poll_interval=0.02)
    watcher.start()
    first = watcher._thread
    watcher.start()
    try:
        assert watcher._thread is first
    finally:
        watcher.stop()
    assert not first.is_alive()


def test_watchdog_handler_filters_to_watched_file(log_file):
    collector = Collector()
    watcher = WatchdogFileWatcher(log_file, collector)
    handler = _WatchedFileHandler(watcher)
    other = str(log_file.parent / "other.log")

    handler.dispatch(FileModifiedEvent(other))
    handler.dispatch(DirModifiedEvent(str(log_file.parent)))
    handler.dispatch(FileModifiedEvent(str(log_file)))
    handler.dispatch(FileCreatedEvent(str(log_file)))

    assert collector.items == [FileWrite(str(log_file)), FileWrite(str(log_file))]


def test_watchdog_handler_maps_delete_and_move(log_file):
    collector = Collector()
    watcher = WatchdogFileWatcher(log_file, collector)
    handler = _WatchedFileHandler(watcher)
    elsewhere = str(log_file.parent / "rotated.log")

    handler.dispatch(FileDeletedEvent(str(log_file)))
    handler.dispatch(FileMovedEvent(str(log_file), elsewhere))
    handler.dispatch(FileMovedEvent(elsewhere, str(log_file)))

    assert collector.items == [
        FileError(str(log_file), "file was deleted"),
        FileError(str(log_file), "file was moved away"),
        FileWrite(str(log_file)),
    ]


def test_watchdog_watcher_start_and_stop(log_file):
    watcher = WatchdogFileWatcher(log_file, lambda n: None)
    watcher.start()
    try:
        assert watcher._observer is not None
    finally:
        watcher.stop()
    assert watcher._observer is None
    watcher.stop()


def test_create_watcher_selects_backend(log_file):
    assert isinstance(create_watcher(log_file, lambda n: None), PollingFileWatcher)
    watcher = create_watcher(log_file, lambda n: None, backend="watchdog", poll_interval=1.0)
    assert isinstance(watcher, WatchdogFileWatcher)


def test_create_watcher_rejects_unknown_backend(log_file):
    with pytest.raises(WatchError):
        create_watcher(log_file, lambda n: None, backend="inotify-magic")


def test_watchdog_start_failure_is_reported_as_error(tmp_path):
    collector = Collector()
    target = tmp_path / "nodir" / "x.log"
    watcher = WatchdogFileWatcher(target, collector)

    watcher.start()

    assert len(collector.items) == 1
    assert isinstance(collector.items[0], FileError)
    assert collector.items[0].file_name == str(target)
    assert collector.items[0].reason
    assert watcher._observer is None
    watcher.stop()


def test_create_watcher_passes_poll_interval_to_polling_only(log_file):
    polling = create_watcher(log_file, lambda n: None, poll_interval=0.3)
    assert polling.poll == 0.3

    watchdog_watcher = create_watcher(log_file, lambda n: None, backend="watchdog", poll_interval=0.3)
    assert not hasattr(watchdog_watcher, "poll")


def test_start_and_stop_are_logged_with_path_argument(log_file, caplog):
    watcher = PollingFileWatcher(log_file, lambda n: None, poll_interval=0.02)
    with caplog.at_level(logging.INFO, logger="log_watcher"):
        watcher.start()
        watcher.stop()

    records = [r for r in caplog.records if r.name == "log_watcher"]
    assert [r.msg for r in records] == ["Started watching %s", "Stopped watching %s"]
    assert all(r.args == (log_file,) for r in records)
