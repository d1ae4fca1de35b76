from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

from PySide6.QtCore import QObject, QThread, Signal, Slot

from core.listing import remote_paths
from core.listing.models import FallbackPolicy
from core.remote.client_base import RemoteClient
from core.transfers.directory_walker import DirectoryWalker
from core.transfers.task_queue import TransferTaskQueue
from core.transfers.transfer_driver import TransferDriver
from core.transfers.transfer_models import TransferTask, WalkFailure, WalkFailureKind, WalkResult
from core.transfers.walk_worker import WalkWorker


@dataclass(slots=True)
class _ActiveWalk:
    walker: DirectoryWalker
    worker: WalkWorker
    remote_dir: str
    local_dir: Path


class DownloadManager(QObject):
    task_changed = Signal(object)
    progress = Signal(object, object)
    task_finished = Signal(object)
    walk_finished = Signal(object)
    all_finished = Signal(object)
    busy_changed = Signal(bool)

    _start_requested = Signal(int)

    def __init__(
        self,
        client: RemoteClient,
        logger: logging.Logger | None = None,
        fallback_policy: FallbackPolicy = FallbackPolicy.SKIP,
        tick_interval_ms: int = 100,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._client = client
        self._logger = logger or logging.getLogger("ftpbrowser.transfers")
        self._fallback_policy = fallback_policy

        self._queue = TransferTaskQueue()
        self._driver = TransferDriver(
            client=client,
            queue=self._queue,
            logger=self._logger,
            tick_interval_ms=tick_interval_ms,
        )

        self._driver_thread = QThread(self)
        self._driver.moveToThread(self._driver_thread)
        self._driver.task_started.connect(self._on_task_started)
        self._driver.progress.connect(self._on_progress)
        self._driver.task_finished.connect(self._on_task_finished)
        self._driver.queue_drained.connect(self._on_queue_drained)
        self._start_requested.connect(self._driver.start)
        self._driver_thread.start()

        self._walk_counter = 0
        self._active_walks: dict[int, _ActiveWalk] = {}
        self._walk_threads: list[QThread] = []
        self._driver_busy = False
        self._requests_issued = 0
        self._shut_down = False

    @property
    def queue(self) -> TransferTaskQueue:
        return self._queue

    @property
    def driver(self) -> TransferDriver:
        return self._driver

    def download_selection(
        self,
        remote_path: str,
        local_path: Path | str,
        is_directory: bool,
        display_name: str = "",
        size_hint: int = 0,
    ) -> None:
        if self._shut_down:
            raise RuntimeError("download manager is shut down")

        local_target = Path(local_path)
        if is_directory:
            self._start_walk(remote_path, local_target)
        else:
            task = TransferTask(
                remote_path=remote_path,
                local_path=local_target,
                is_directory=False,
                size_bytes=size_hint,
                display_name=display_name,
            )
            self._queue.enqueue(task)
            self._logger.info("Queued file download: %s -> %s", task.remote_path, task.local_path)

        self._ensure_driver_running()

    def cancel_all(self) -> None:
        for active in self._active_walks.values():
            active.walker.cancel_event.set()
        discarded = self._driver.cancel()
        self._logger.info(
            "Cancel requested: discarded=%s active_walks=%s",
            discarded,
            len(self._active_walks),
        )

    def is_busy(self) -> bool:
        return self._driver_busy or bool(self._active_walks)

    def pending_count(self) -> int:
        return len(self._queue)

    def current_label(self) -> str:
        task = self._driver.current_task or self._queue.peek_front()
        return task.display_name if task is not None else ""

    def shutdown(self) -> None:
        if self._shut_down:
            return
        self._shut_down = True

        self.cancel_all()
        for thread in self._walk_threads:
            thread.quit()
            thread.wait()
        self._walk_threads.clear()

        self._driver_thread.quit()
        self._driver_thread.wait()

    def _start_walk(self, remote_path: str, local_dir: Path) -> None:
        self._prune_walk_threads()

        self._walk_counter += 1
        walk_id = self._walk_counter
        remote_dir = remote_paths.normalize(remote_path, directory=True)

        walker = DirectoryWalker(
            client=self._client,
            fallback_policy=self._fallback_policy,
            logger=self._logger,
        )
        thread = QThread(self)
        worker = WalkWorker(
            walk_id=walk_id,
            walker=walker,
            queue=self._queue,
            remote_dir=remote_dir,
            local_dir=local_dir,
        )
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.finished.connect(self._on_walk_finished)
        worker.failed.connect(self._on_walk_failed)
        worker.finished.connect(thread.quit)
        worker.failed.connect(thread.quit)
        thread.finished.connect(worker.deleteLater)

        self._driver.hold()
        self._active_walks[walk_id] = _ActiveWalk(
            walker=walker,
            worker=worker,
            remote_dir=remote_dir,
            local_dir=local_dir,
        )
        self._walk_threads.append(thread)
        self._logger.info("Queued directory download: %s -> %s", remote_dir, local_dir)
        thread.start()

    def _prune_walk_threads(self) -> None:
        alive: list[QThread] = []
        for thread in self._walk_threads:
            if thread.isFinished():
                thread.deleteLater()
            else:
                alive.append(thread)
        self._walk_threads = alive

    def _ensure_driver_running(self) -> None:
        if not self._driver_busy:
            self._driver_busy = True
            self.busy_changed.emit(True)
        self._requests_issued += 1
        self._driver.arm()
        self._start_requested.emit(self._requests_issued)

    def _end_walk(self, walk_id: int) -> _ActiveWalk | None:
        active = self._active_walks.pop(walk_id, None)
        if active is None:
            return None

        self._driver.release()
        if not self.is_busy():
            self.busy_changed.emit(False)
        return active

    @Slot(int, object)
    def _on_walk_finished(self, walk_id: int, result: object) -> None:
        if self._end_walk(walk_id) is None:
            return
        if isinstance(result, WalkResult):
            for failure in result.failures:
                self._logger.warning(
                    "Walk branch failed (%s): %s: %s",
                    failure.kind.value,
                    failure.remote_path,
                    failure.message,
                )
            self.walk_finished.emit(result)

    @Slot(int, str)
    def _on_walk_failed(self, walk_id: int, message: str) -> None:
        active = self._end_walk(walk_id)
        if active is None:
            return
        self._logger.error("Walk failed: %s: %s", active.remote_dir, message)
        self.walk_finished.emit(
            WalkResult(
                remote_root=active.remote_dir,
                failures=[
                    WalkFailure(
                        remote_path=active.remote_dir,
                        local_path=active.local_dir,
                        kind=WalkFailureKind.LISTING,
                        message=message,
                    )
                ],
            )
        )

    @Slot(object)
    def _on_task_started(self, task: object) -> None:
        self.task_changed.emit(task)

    @Slot(object, object)
    def _on_progress(self, received: object, total: object) -> None:
        self.progress.emit(received, total)

    @Slot(object)
    def _on_task_finished(self, outcome: object) -> None:
        self.task_finished.emit(outcome)

    @Slot(object, int)
    def _on_queue_drained(self, summary: object, served_request: int) -> None:
        # A newer start request is still queued for the driver thread; its run
        # reports its own drain.
        if served_request < self._requests_issued:
            return
        self._driver_busy = False
        if not self.is_busy():
            self.busy_changed.emit(False)
        self.all_finished.emit(summary)
