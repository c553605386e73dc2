import logging

from conftest import FakeLedger
from services.auto_sync import AutoSync
from services.sync_queue import SyncQueue
from storage.operation_store import StorageError


ENDPOINT = "/savingsaccounts/101/transactions?command=deposit"


def _auto(store, ledger, monkeypatch):
    auto = AutoSync(SyncQueue(store, ledger), interval_seconds=3600)
    scheduled = []
    monkeypatch.setattr(auto, "_schedule_next", lambda: scheduled.append(True))
    auto._running = True
    return auto, scheduled


def test_tick_drains_when_something_is_pending(sql_store, monkeypatch):
    ledger = FakeLedger()
    auto, scheduled = _auto(sql_store, ledger, monkeypatch)
    auto.queue.enqueue("DEPOSIT", ENDPOINT, "POST", {"transactionAmount": 5000})

    auto._on_timer()

    assert len(ledger.calls) == 1
    assert auto.queue.pending_count() == 0
    assert auto.last_report.delivered == 1
    assert auto.last_sync is not None
    assert scheduled == [True]


def test_tick_skips_empty_queue(sql_store, monkeypatch):
    ledger = FakeLedger()
    auto, scheduled = _auto(sql_store, ledger, monkeypatch)

    auto._on_timer()

    assert ledger.calls == []
    assert auto.last_report is None
    assert scheduled == [True]


def test_tick_survives_storage_errors(monkeypatch):
    class UnavailableStore:
        def load(self):
            raise StorageError("database is locked")

        def save(self, operations):
            raise StorageError("database is locked")

    auto = AutoSync(SyncQueue(UnavailableStore(), FakeLedger(), recover=False), interval_seconds=3600)
    scheduled = []
    monkeypatch.setattr(auto, "_schedule_next", lambda: scheduled.append(True))
    auto._running = True

    auto._on_timer()

    assert scheduled == [True]


def test_tick_keeps_schedule_after_unexpected_error(monkeypatch, caplog):
    auto = AutoSync(SyncQueue(BrokenQueueStore(), FakeLedger(), recover=False), interval_seconds=3600)
    scheduled = []
    monkeypatch.setattr(auto, "_schedule_next", lambda: scheduled.append(True))
    auto._running = True

    with caplog.at_level(logging.ERROR, logger="services.auto_sync"):
        auto._on_timer()

    assert scheduled == [True]
    assert any(record.exc_info for record in caplog.records)


class BrokenQueueStore:
    def load(self):
        raise ValueError("Unknown operation kind: 'WITHDRAWAL'")

    def save(self, operations):
        raise AssertionError("nothing should be written")


def test_sync_now_drains_immediately(sql_store):
    ledger = FakeLedger([False])
    auto = AutoSync(SyncQueue(sql_store, ledger))
    auto.queue.enqueue("DEPOSIT", ENDPOINT, "POST", {})

    report = auto.sync_now()

    assert report.requeued == 1
    assert auto.queue.pending_count() == 1
    assert auto.last_report is report


def test_start_and_stop_manage_the_timer(sql_store):
    auto = AutoSync(SyncQueue(sql_store, FakeLedger()), interval_seconds=3600)

    auto.start()
    auto.start()
    timer = auto._timer
    assert auto.is_running
    assert timer is not None and timer.daemon

    auto.stop()
    assert not auto.is_running
    assert auto._timer is None
    timer.join(timeout=1)
    assert not timer.is_alive()
