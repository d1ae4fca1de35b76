from __future__ import annotations

from pathlib import Path
import threading
from typing import BinaryIO


class TransferCancelled(RuntimeError):
    pass


class CancellableSink:
    def __init__(self, handle: BinaryIO, cancel_event: threading.Event) -> None:
        self._handle = handle
        self._cancel_event = cancel_event
        self._bytes_written = 0

    @property
    def bytes_written(self) -> int:
        return self._bytes_written

    @property
    def closed(self) -> bool:
        return self._handle.closed

    def write(self, data: bytes) -> int:
        if self._cancel_event.is_set():
            self.close()
            raise TransferCancelled("transfer cancelled")
        written = self._handle.write(data)
        self._bytes_written += len(data)
        return written

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()


def ensure_dir(path: Path) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)
