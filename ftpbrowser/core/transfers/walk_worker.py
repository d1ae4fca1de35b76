from __future__ import annotations

import asyncio
from pathlib import Path

from PySide6.QtCore import QObject, Signal, Slot

from core.transfers.directory_walker import DirectoryWalker
from core.transfers.task_queue import TransferTaskQueue
from core.transfers.transfer_models import TransferTask


class WalkWorker(QObject):
    finished = Signal(int, object)
    failed = Signal(int, str)

    def __init__(
        self,
        walk_id: int,
        walker: DirectoryWalker,
        queue: TransferTaskQueue,
        remote_dir: str,
        local_dir: Path,
    ) -> None:
        super().__init__()
        self._walk_id = walk_id
        self._walker = walker
        self._queue = queue
        self._remote_dir = remote_dir
        self._local_dir = Path(local_dir)

    @Slot()
    def run(self) -> None:
        try:
            result = asyncio.run(self._walker.walk(self._remote_dir, self._local_dir, self._enqueue))
            self.finished.emit(self._walk_id, result)
        except Exception as error:
            self.failed.emit(self._walk_id, str(error))

    def _enqueue(self, task: TransferTask) -> None:
        self._queue.enqueue_unless_cancelled(task, self._walker.cancel_event)
