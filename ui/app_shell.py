# ui/app_shell.py
from __future__ import annotations

import asyncio
import flet as ft

from core.settings import SYNC, UI
from services.auto_sync import AutoSync
from services.sync_queue import DrainReport, SyncQueue
from storage.operation_store import StorageError


def pending_label(count: int) -> str:
    if count <= 0:
        return "All synced"
    if count == 1:
        return "1 transaction pending"
    return f"{count} transactions pending"


def report_label(report: DrainReport) -> str:
    if report.skipped:
        return "Sync already in progress"
    if not report.attempted:
        return "Nothing to sync"
    undelivered = report.requeued + report.failed
    if not undelivered:
        return f"Synced {report.delivered} of {report.attempted}"
    return f"Synced {report.delivered} of {report.attempted}, {undelivered} not delivered"


class AppShell:
    def __init__(self, page: ft.Page, queue: SyncQueue, auto_sync: AutoSync | None = None):
        self.page = page
        self.queue = queue
        self.auto_sync = auto_sync or AutoSync(queue)

        self.page.title = UI.app_title
        self.page.horizontal_alignment = ft.CrossAxisAlignment.STRETCH
        self.page.vertical_alignment = ft.MainAxisAlignment.START

        self.badge = ft.Text(pending_label(0), size=16, weight=ft.FontWeight.W_600)
        self.status = ft.Text("", size=12)
        self.progress = ft.ProgressRing(width=16, height=16, visible=False)
        self.sync_btn = ft.ElevatedButton(
            "Sync Now",
            icon=ft.Icons.SYNC,
            on_click=self.on_sync_now,
        )

        self.root = ft.Container(
            content=ft.Column(
                controls=[
                    ft.Row(
                        [ft.Icon(ft.Icons.CLOUD_UPLOAD_OUTLINED), self.badge, self.progress],
                        spacing=8,
                        vertical_alignment=ft.CrossAxisAlignment.CENTER,
                    ),
                    ft.Row([self.sync_btn], alignment=ft.MainAxisAlignment.START),
                    self.status,
                ],
                spacing=12,
            ),
            padding=20,
        )

        self._poll_task: asyncio.Task | None = None
        self._polling = False

    # ---------- counters ----------
    def _show_count(self, count: int) -> None:
        self.badge.value = pending_label(count)

    def _show_unavailable(self, error: StorageError) -> None:
        self.badge.value = "Sync queue unavailable"
        self.status.value = str(error)

    def refresh_counts(self) -> None:
        try:
            self._show_count(self.queue.pending_count())
        except StorageError as e:
            self._show_unavailable(e)

    async def refresh_counts_async(self) -> None:
        # the count reads the whole store; keep it off the page's event loop
        try:
            count = await asyncio.to_thread(self.queue.pending_count)
        except StorageError as e:
            self._show_unavailable(e)
            return
        self._show_count(count)

    def _start_polling(self) -> None:
        self._stop_polling()
        self._polling = True
        interval = SYNC.pending_poll_interval_sec

        async def _loop():
            while self._polling:
                await self.refresh_counts_async()
                self.page.update()
                await asyncio.sleep(interval)

        self._poll_task = self.page.run_task(_loop)

    def _stop_polling(self) -> None:
        self._polling = False
        if self._poll_task:
            self._poll_task.cancel()
        self._poll_task = None

    # ---------- actions ----------
    def on_sync_now(self, _=None) -> None:
        self.sync_btn.disabled = True
        self.progress.visible = True
        self.page.update()
        try:
            report = self.auto_sync.sync_now()
            self.status.value = report_label(report)
        except StorageError as e:
            self.status.value = f"Sync failed: {e}"
        finally:
            self.sync_btn.disabled = False
            self.progress.visible = False
            self.refresh_counts()
            self.page.update()

    # ---------- mounting ----------
    def mount(self) -> None:
        self.page.controls.clear()
        self.page.add(self.root)
        self.refresh_counts()
        self.page.update()
        self._start_polling()
        if SYNC.auto_drain_enabled:
            self.auto_sync.start()

    def unmount(self) -> None:
        self._stop_polling()
        self.auto_sync.stop()
