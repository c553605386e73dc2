"""Periodic background drain of the sync queue.

A daemon ``threading.Timer`` chain drains the queue every
``SYNC.auto_drain_interval_sec`` while there is something pending. Manual
"Sync Now" requests go through :meth:`AutoSync.sync_now`; overlap with a
timer tick is settled by the queue's own single-sweep rule.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from core.settings import SYNC
from datetime_utils import utc_now
from services.sync_queue import DrainReport, SyncQueue
from storage.operation_store import StorageError

logger = logging.getLogger(__name__)


@dataclass
class AutoSync:
    queue: SyncQueue
    interval_seconds: float = float(SYNC.auto_drain_interval_sec)
    _timer: Optional[threading.Timer] = field(default=None, init=False, repr=False)
    _running: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _last_report: Optional[DrainReport] = field(default=None, init=False, repr=False)
    _last_sync: Optional[datetime] = field(default=None, init=False, repr=False)

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
        self._schedule_next()
        logger.debug("Auto sync started (interval=%ss)", self.interval_seconds)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.debug("Auto sync stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_report(self) -> Optional[DrainReport]:
        return self._last_report

    @property
    def last_sync(self) -> Optional[datetime]:
        return self._last_sync

    def sync_now(self) -> DrainReport:
        """Drain immediately. Storage errors propagate to the caller."""

        report = self.queue.drain()
        if not report.skipped:
            self._last_report = report
            self._last_sync = utc_now()
        return report

    # ------------------------------------------------------------------
    def _schedule_next(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._timer = threading.Timer(self.interval_seconds, self._on_timer)
            self._timer.daemon = True
            self._timer.start()

    def _on_timer(self) -> None:
        if not self._running:
            return
        try:
            if self.queue.pending_count() > 0:
                self.sync_now()
        except StorageError as exc:
            logger.error("Auto sync tick failed: %s", exc)
        except Exception:
            logger.exception("Unexpected error during auto sync tick")
        finally:
            self._schedule_next()


__all__ = ["AutoSync"]
