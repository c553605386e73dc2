from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, List, Optional

from core.settings import SYNC, SYNC_LOG_PATH
from models.queued_operation import (
    OperationStatus,
    QueuedOperation,
    coerce_kind,
    coerce_method,
)
from services.ledger_client import LedgerClient
from storage.config import load_config
from storage.db import init_db, session_factory
from storage.operation_store import OperationStore, SqlOperationStore


MAX_ERROR_LENGTH = 1000

Deliver = Callable[[QueuedOperation], bool]


def _ensure_logger() -> logging.Logger:
    logger = logging.getLogger("vsla.sync")
    if not logger.handlers:
        SYNC_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(SYNC_LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    return logger


def _new_operation_id() -> str:
    return f"txn_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}"


@dataclass
class DrainReport:
    attempted: int = 0
    delivered: int = 0
    requeued: int = 0
    failed: int = 0
    skipped: bool = False


class SyncQueue:
    """Durable outbox of ledger requests with bounded retries.

    All reads and writes go through the injected store; nothing is staged in
    memory. ``deliver`` is called with one operation at a time and must return
    ``True`` when the ledger accepted it. Returning ``False`` or raising counts
    as a failed attempt.
    """

    def __init__(
        self,
        store: Optional[OperationStore] = None,
        deliver: Optional[Deliver] = None,
        *,
        retry_ceiling: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
        recover: bool = True,
    ) -> None:
        self.retry_ceiling = SYNC.retry_ceiling if retry_ceiling is None else retry_ceiling
        if self.retry_ceiling < 1:
            raise ValueError(f"retry_ceiling must be at least 1, got {self.retry_ceiling}")
        self.store = store or SqlOperationStore(session_factory(init_db()))
        self.deliver = deliver or LedgerClient(load_config()).deliver
        self.logger = logger or _ensure_logger()
        self._store_lock = threading.RLock()
        self._drain_lock = threading.Lock()
        if recover:
            self.recover_interrupted()

    # ------------------------------------------------------------------
    # Public API
    def enqueue(self, kind: Any, endpoint: str, method: Any, body: Any) -> str:
        operation = QueuedOperation(
            id=_new_operation_id(),
            kind=coerce_kind(kind),
            endpoint=endpoint,
            method=coerce_method(method),
            body=body,
        )
        with self._store_lock:
            operations = self.store.load()
            operations.append(operation)
            self.store.save(operations)
        self.logger.info(
            "Queued %s %s %s as %s",
            operation.kind.value,
            operation.method.value,
            operation.endpoint,
            operation.id,
        )
        return operation.id

    def pending_count(self) -> int:
        return sum(1 for op in self.store.load() if op.status is OperationStatus.PENDING)

    def failed_count(self) -> int:
        return sum(1 for op in self.store.load() if op.status is OperationStatus.FAILED)

    def operations(self, status: Optional[OperationStatus] = None) -> List[QueuedOperation]:
        operations = self.store.load()
        if status is None:
            return operations
        return [op for op in operations if op.status is status]

    def remove(self, operation_id: str) -> bool:
        with self._store_lock:
            operations = self.store.load()
            kept = [op for op in operations if op.id != operation_id]
            if len(kept) == len(operations):
                return False
            self.store.save(kept)
        self.logger.info("Removed %s from the sync queue", operation_id)
        return True

    def recover_interrupted(self) -> int:
        """Return PROCESSING leftovers from an interrupted sweep to PENDING.

        The outcome of their last delivery is unknown, so they will be sent
        again (at-least-once). ``retry_count`` is left as it was.
        """

        if not self._drain_lock.acquire(blocking=False):
            return 0
        try:
            with self._store_lock:
                operations = self.store.load()
                recovered = 0
                for index, op in enumerate(operations):
                    if op.status is OperationStatus.PROCESSING:
                        operations[index] = op.with_status(OperationStatus.PENDING)
                        recovered += 1
                if recovered:
                    self.store.save(operations)
        finally:
            self._drain_lock.release()
        if recovered:
            self.logger.info("Recovered %d interrupted operation(s)", recovered)
        return recovered

    def drain(self) -> DrainReport:
        """Attempt delivery of every operation that is PENDING right now.

        A call made while another sweep is running returns immediately with
        ``skipped=True``. Storage errors abort the sweep and propagate.
        """

        if not self._drain_lock.acquire(blocking=False):
            self.logger.debug("Sync sweep already running, skipping")
            return DrainReport(skipped=True)
        try:
            return self._sweep()
        finally:
            self._drain_lock.release()

    # ------------------------------------------------------------------
    # Sweep helpers
    def _sweep(self) -> DrainReport:
        report = DrainReport()
        snapshot = [op.id for op in self.operations(OperationStatus.PENDING)]
        if not snapshot:
            return report

        self.logger.info("Sync sweep started: %d pending", len(snapshot))
        for operation_id in snapshot:
            operation = self._claim(operation_id)
            if operation is None:
                continue
            report.attempted += 1

            error: Optional[str] = None
            try:
                delivered = bool(self.deliver(operation))
                if not delivered:
                    error = "ledger rejected the request"
            except Exception as exc:  # any transport failure is a failed attempt
                delivered = False
                error = f"{type(exc).__name__}: {exc}"

            if delivered:
                self._discard(operation_id)
                report.delivered += 1
                self.logger.info("Delivered %s (%s)", operation_id, operation.kind.value)
                continue

            updated = self._record_failure(operation_id, error)
            if updated is None:
                continue
            if updated.status is OperationStatus.FAILED:
                report.failed += 1
                self.logger.error(
                    "Giving up on %s after %d attempts: %s",
                    operation_id,
                    updated.retry_count,
                    error,
                )
            else:
                report.requeued += 1
                self.logger.warning(
                    "Delivery of %s failed (attempt %d/%d): %s",
                    operation_id,
                    updated.retry_count,
                    self.retry_ceiling,
                    error,
                )

        self.logger.info(
            "Sync sweep finished: %d delivered, %d requeued, %d failed",
            report.delivered,
            report.requeued,
            report.failed,
        )
        return report

    def _claim(self, operation_id: str) -> Optional[QueuedOperation]:
        with self._store_lock:
            operations = self.store.load()
            for index, op in enumerate(operations):
                if op.id != operation_id:
                    continue
                if op.status is not OperationStatus.PENDING:
                    return None
                operations[index] = op.with_status(OperationStatus.PROCESSING)
                self.store.save(operations)
                return operations[index]
        return None

    def _discard(self, operation_id: str) -> None:
        with self._store_lock:
            operations = self.store.load()
            self.store.save([op for op in operations if op.id != operation_id])

    def _record_failure(self, operation_id: str, error: Optional[str]) -> Optional[QueuedOperation]:
        with self._store_lock:
            operations = self.store.load()
            for index, op in enumerate(operations):
                if op.id != operation_id:
                    continue
                retry_count = op.retry_count + 1
                status = (
                    OperationStatus.FAILED
                    if retry_count >= self.retry_ceiling
                    else OperationStatus.PENDING
                )
                operations[index] = op.with_status(
                    status,
                    retry_count=retry_count,
                    last_error=(error or "")[:MAX_ERROR_LENGTH] or None,
                )
                self.store.save(operations)
                return operations[index]
        return None


__all__ = ["DrainReport", "SyncQueue"]
