import os
import sys
import tempfile
from pathlib import Path

# Keep the outbox, config and sync log of a test run out of the real data dir.
os.environ.setdefault("VSLA_DATA_DIR", tempfile.mkdtemp(prefix="vsla-tests-"))

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from storage.db import create_queue_engine, init_db, session_factory
from storage.operation_store import JsonOperationStore, SqlOperationStore


class FakeLedger:
    """Scripted stand-in for ``LedgerClient.deliver``.

    ``outcomes`` are consumed one per call: ``True``/``False`` are returned,
    exceptions are raised. Once exhausted, ``default`` is returned.
    """

    def __init__(self, outcomes=None, default=True):
        self.outcomes = list(outcomes or [])
        self.default = default
        self.calls = []

    def __call__(self, operation):
        self.calls.append(operation)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    @property
    def delivered_ids(self):
        return [op.id for op in self.calls]


@pytest.fixture()
def engine():
    return init_db(create_queue_engine(":memory:"))


@pytest.fixture()
def sql_store(engine):
    return SqlOperationStore(session_factory(engine))


@pytest.fixture()
def json_store(tmp_path):
    return JsonOperationStore(tmp_path / "sync_queue.json")


@pytest.fixture(params=["sql", "json"])
def store(request, engine, tmp_path):
    if request.param == "sql":
        return SqlOperationStore(session_factory(engine))
    return JsonOperationStore(tmp_path / "sync_queue.json")


@pytest.fixture()
def ledger():
    return FakeLedger()
