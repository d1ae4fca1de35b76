from __future__ import annotations

from typing import Callable, Protocol

ProgressCallback = Callable[[int, int], None]


class BinarySink(Protocol):
    def write(self, data: bytes) -> object: ...


class RemoteClient(Protocol):
    async def test_connection(self) -> tuple[bool, str]: ...

    async def list_raw(self, remote_path: str) -> tuple[bool, str, list[str]]: ...

    async def fetch(
        self,
        remote_path: str,
        sink: BinarySink,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[bool, str, int]: ...
