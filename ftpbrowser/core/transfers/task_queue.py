from __future__ import annotations

from collections import deque
import threading

from core.transfers.transfer_models import TransferTask


class TransferTaskQueue:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: deque[TransferTask] = deque()

    def enqueue(self, task: TransferTask) -> None:
        with self._lock:
            self._tasks.append(task)

    def enqueue_unless_cancelled(self, task: TransferTask, cancel_event: threading.Event) -> bool:
        """Enqueue unless ``cancel_event`` is set. The check and the append share
        the queue lock, so a producer cancelled before a :meth:`clear` can never
        add a task after it."""
        with self._lock:
            if cancel_event.is_set():
                return False
            self._tasks.append(task)
            return True

    def dequeue_or_none(self) -> TransferTask | None:
        with self._lock:
            if not self._tasks:
                return None
            return self._tasks.popleft()

    def peek_front(self) -> TransferTask | None:
        with self._lock:
            if not self._tasks:
                return None
            return self._tasks[0]

    def clear(self) -> int:
        with self._lock:
            discarded = len(self._tasks)
            self._tasks.clear()
            return discarded

    def is_empty(self) -> bool:
        with self._lock:
            return not self._tasks

    def snapshot(self) -> list[TransferTask]:
        with self._lock:
            return list(self._tasks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)
