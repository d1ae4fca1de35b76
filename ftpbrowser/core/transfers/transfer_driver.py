from __future__ import annotations

import asyncio
import logging
import threading

from PySide6.QtCore import QObject, QTimer, Signal, Slot

from core.remote.client_base import RemoteClient
from core.transfers.execute_local import TransferCancelled, ensure_dir
from core.transfers.execute_remote import download_remote_file_to_local_atomic
from core.transfers.task_queue import TransferTaskQueue
from core.transfers.transfer_models import DrainSummary, TransferOutcome, TransferTask
from i18n.i18n import tr


class TransferDriver(QObject):
    """Drains a :class:`TransferTaskQueue` one task per timer tick.

    Every tick handles at most one task and then hands control back to the
    event loop of the thread the driver lives in. Producers that are still
    enqueueing (a running directory walk) call :meth:`hold` so that an empty
    queue is not mistaken for the end of the download; :meth:`release` lets the
    driver finish once the queue runs dry.
    """

    task_started = Signal(object)
    progress = Signal(object, object)
    task_finished = Signal(object)
    queue_drained = Signal(object, int)
    running_changed = Signal(bool)

    DIRECTORY_TICK_MS = 0

    def __init__(
        self,
        client: RemoteClient,
        queue: TransferTaskQueue,
        logger: logging.Logger | None = None,
        tick_interval_ms: int = 100,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._queue = queue
        self._logger = logger or logging.getLogger("ftpbrowser.transfers")
        self._tick_interval_ms = max(0, int(tick_interval_ms))

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.timeout.connect(self.tick)

        self._cancel_event = threading.Event()
        self._holds_lock = threading.Lock()
        self._holds = 0

        self._running = False
        self._served_request = 0
        self._current_task: TransferTask | None = None
        self._summary = DrainSummary()

    @property
    def current_task(self) -> TransferTask | None:
        return self._current_task

    @property
    def summary(self) -> DrainSummary:
        return self._summary

    def is_running(self) -> bool:
        return self._running

    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def hold(self) -> None:
        with self._holds_lock:
            self._holds += 1

    def release(self) -> None:
        with self._holds_lock:
            self._holds = max(0, self._holds - 1)

    def is_held(self) -> bool:
        with self._holds_lock:
            return self._holds > 0

    def arm(self) -> None:
        """Clear a previous cancel. Called from the requesting thread before the
        queued :meth:`start` so that a cancel issued in between still applies."""
        self._cancel_event.clear()

    @Slot(int)
    def start(self, request_id: int = 0) -> None:
        self._served_request = max(self._served_request, request_id)
        if self._running:
            return

        self._running = True
        self._summary = DrainSummary()
        self.running_changed.emit(True)
        self._schedule_next(self._tick_interval_ms)

    def cancel(self) -> int:
        self._cancel_event.set()
        discarded = self._queue.clear()
        self._logger.info("Transfer queue cancelled: discarded=%s", discarded)
        return discarded

    @Slot()
    def tick(self) -> None:
        if not self._running:
            return

        if self._cancel_event.is_set():
            self._finish(cancelled=True)
            return

        task = self._queue.dequeue_or_none()
        if task is None:
            if self.is_held():
                self._schedule_next(self._tick_interval_ms)
                return
            self._finish(cancelled=False)
            return

        self._current_task = task
        self.task_started.emit(task)

        if task.is_directory:
            outcome = self._run_directory_task(task)
            next_delay = self.DIRECTORY_TICK_MS
        else:
            outcome = self._run_file_task(task)
            next_delay = self._tick_interval_ms

        self._current_task = None
        self._summary.record(outcome)
        self.task_finished.emit(outcome)

        if self._cancel_event.is_set():
            self._finish(cancelled=True)
            return

        self._schedule_next(next_delay)

    def _run_directory_task(self, task: TransferTask) -> TransferOutcome:
        try:
            ensure_dir(task.local_path)
        except OSError as error:
            self._logger.error("Cannot create local directory %s: %s", task.local_path, error)
            return TransferOutcome(task=task, success=False, message=str(error))

        return TransferOutcome(task=task, success=True, message="ok")

    def _run_file_task(self, task: TransferTask) -> TransferOutcome:
        self._logger.info("Downloading %s -> %s", task.remote_path, task.local_path)

        def forward_progress(received: int, total: int) -> None:
            self.progress.emit(received, total if total > 0 else task.size_bytes)

        try:
            copied = asyncio.run(
                download_remote_file_to_local_atomic(
                    self._client,
                    task.remote_path,
                    task.local_path,
                    self._cancel_event,
                    forward_progress,
                )
            )
        except TransferCancelled:
            self._logger.info("Download cancelled: %s", task.remote_path)
            return TransferOutcome(
                task=task,
                success=False,
                message=tr("transfers.status.cancelled"),
                cancelled=True,
            )
        except Exception as error:
            self._logger.error("Download failed: %s: %s", task.remote_path, error)
            return TransferOutcome(task=task, success=False, message=str(error))

        self._logger.info("Download finished: %s bytes=%s", task.remote_path, copied)
        return TransferOutcome(task=task, success=True, message="ok", bytes_received=copied)

    def _schedule_next(self, delay_ms: int) -> None:
        self._timer.start(delay_ms)

    def _finish(self, cancelled: bool) -> None:
        self._timer.stop()
        self._running = False
        self._current_task = None
        self._summary.cancelled = cancelled

        summary = self._summary
        self._logger.info(
            "Transfer queue finished: attempted=%s succeeded=%s failed=%s bytes=%s cancelled=%s",
            summary.attempted,
            summary.succeeded,
            summary.failed,
            summary.bytes_received,
            summary.cancelled,
        )
        self.running_changed.emit(False)
        self.queue_drained.emit(summary, self._served_request)
