"""Durable backends for the sync queue collection.

The queue manager only ever sees :class:`OperationStore`: ``load`` returns the
whole collection in FIFO order and ``save`` replaces it. Two backends exist:

* :class:`SqlOperationStore` keeps one row per operation in the app SQLite DB.
* :class:`JsonOperationStore` keeps the collection as a single JSON document
  under a fixed key, the way a browser ``localStorage`` slot would.

Both raise :class:`StorageError` when the medium itself cannot be used.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.settings import QUEUE_JSON_PATH, SYNC
from datetime_utils import ensure_utc
from models.outbox_row import OutboxRow
from models.queued_operation import (
    OperationStatus,
    QueuedOperation,
    coerce_kind,
    coerce_method,
)


class StorageError(RuntimeError):
    """The queue store could not be read or written."""


class OperationStore(Protocol):
    def load(self) -> List[QueuedOperation]:
        ...

    def save(self, operations: Iterable[QueuedOperation]) -> None:
        ...


def _row_to_operation(row: OutboxRow) -> QueuedOperation:
    try:
        body = json.loads(row.body)
    except json.JSONDecodeError:
        # keep the raw text; the delivery attempt will surface the problem
        body = row.body
    return QueuedOperation(
        id=row.id,
        kind=coerce_kind(row.kind),
        endpoint=row.endpoint,
        method=coerce_method(row.method),
        body=body,
        created_at=ensure_utc(row.created_at),
        retry_count=row.retry_count,
        status=OperationStatus(row.status),
        last_error=row.last_error,
    )


def _operation_to_row(op: QueuedOperation) -> OutboxRow:
    return OutboxRow(
        id=op.id,
        kind=op.kind.value,
        endpoint=op.endpoint,
        method=op.method.value,
        body=json.dumps(op.body, ensure_ascii=False),
        created_at=op.created_at,
        retry_count=op.retry_count,
        status=op.status.value,
        last_error=op.last_error,
    )


class SqlOperationStore:
    """Queue collection stored in the ``queuedoperation`` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def load(self) -> List[QueuedOperation]:
        try:
            with self._session_factory() as session:
                rows = list(session.exec(select(OutboxRow).order_by(OutboxRow.seq)))
                return [_row_to_operation(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot read sync queue: {exc}") from exc
        except ValueError as exc:
            raise StorageError(f"Unreadable sync queue row: {exc}") from exc

    def save(self, operations: Iterable[QueuedOperation]) -> None:
        # Serialise first so an unserialisable body leaves the table untouched.
        rows = [_operation_to_row(op) for op in operations]
        try:
            with self._session_factory() as session:
                for existing in session.exec(select(OutboxRow)).all():
                    session.delete(existing)
                session.flush()
                for row in rows:
                    session.add(row)
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot write sync queue: {exc}") from exc


class JsonOperationStore:
    """Queue collection stored as one JSON document under a fixed key."""

    def __init__(self, path: Optional[Path | str] = None, key: Optional[str] = None):
        self.path = Path(path or QUEUE_JSON_PATH)
        self.key = key or SYNC.storage_key

    def _read(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            raise StorageError(f"Sync queue document {self.path} is corrupt: {exc}") from exc
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Sync queue document {self.path} is not a JSON object")
        return data

    def load(self) -> List[QueuedOperation]:
        entries = self._read().get(self.key) or []
        if not isinstance(entries, list):
            raise StorageError(f"Sync queue key {self.key!r} in {self.path} is not a list")
        result: List[QueuedOperation] = []
        for index, entry in enumerate(entries):
            try:
                result.append(QueuedOperation.from_dict(entry))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                entry_id = entry.get("id") if isinstance(entry, dict) else None
                raise StorageError(
                    f"Unreadable sync queue entry {entry_id or index} in {self.path}: {exc!r}"
                ) from exc
        return result

    def save(self, operations: Iterable[QueuedOperation]) -> None:
        data = self._read()
        data[self.key] = [op.to_dict() for op in operations]
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        tmp = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc
        finally:
            if tmp.exists():
                try:
                    tmp.unlink()
                except OSError:
                    pass


__all__ = ["JsonOperationStore", "OperationStore", "SqlOperationStore", "StorageError"]
