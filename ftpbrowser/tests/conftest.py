from __future__ import annotations

import asyncio
import threading
import time
from typing import Callable

import pytest
from PySide6.QtCore import QCoreApplication


def unix_dir_line(name: str) -> str:
    return f"drwxr-xr-x    2 ftp      ftp          4096 Jan 01 12:00 {name}"


def unix_file_line(name: str, size: int) -> str:
    return f"-rw-r--r--    1 ftp      ftp      {size:>8} Jan 01 12:00 {name}"


class FakeRemoteClient:
    """In-memory stand-in for an FTP server, keyed by normalized remote path."""

    def __init__(self, chunk_size: int = 4, report_total: bool = False) -> None:
        self.listings: dict[str, list[str]] = {}
        self.files: dict[str, bytes] = {}
        self.failing: set[str] = set()
        self.gates: dict[str, threading.Event] = {}
        self.chunk_size = chunk_size
        self.report_total = report_total
        self.on_chunk: Callable[[str, int], None] | None = None
        self.listed: list[str] = []
        self.fetched: list[str] = []

    @classmethod
    def from_tree(cls, tree: dict, root: str = "/", **kwargs: object) -> FakeRemoteClient:
        client = cls(**kwargs)
        client.add_tree(root, tree)
        return client

    def add_tree(self, remote_dir: str, tree: dict) -> None:
        lines: list[str] = []
        for name, value in tree.items():
            if isinstance(value, dict):
                lines.append(unix_dir_line(name))
                self.add_tree(f"{remote_dir}{name}/", value)
            else:
                lines.append(unix_file_line(name, len(value)))
                self.files[f"{remote_dir}{name}"] = value
        self.listings[remote_dir] = lines

    async def test_connection(self) -> tuple[bool, str]:
        return True, "ok"

    async def list_raw(self, remote_path: str) -> tuple[bool, str, list[str]]:
        self.listed.append(remote_path)
        gate = self.gates.get(remote_path)
        if gate is not None:
            await asyncio.to_thread(gate.wait, 10.0)
        if remote_path in self.failing:
            return False, "550 Permission denied", []
        if remote_path not in self.listings:
            return False, "550 No such directory", []
        return True, "ok", list(self.listings[remote_path])

    async def fetch(self, remote_path, sink, on_progress=None) -> tuple[bool, str, int]:
        self.fetched.append(remote_path)
        if remote_path in self.failing or remote_path not in self.files:
            return False, "550 Failed to open file", 0

        data = self.files[remote_path]
        total = 0
        try:
            for offset in range(0, len(data), self.chunk_size):
                chunk = data[offset : offset + self.chunk_size]
                sink.write(chunk)
                total += len(chunk)
                if on_progress is not None:
                    on_progress(total, len(data) if self.report_total else 0)
                if self.on_chunk is not None:
                    self.on_chunk(remote_path, total)
        except Exception as error:
            return False, str(error), total
        return True, "ok", total


@pytest.fixture(scope="session")
def qapp() -> QCoreApplication:
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


@pytest.fixture
def wait_until(qapp: QCoreApplication) -> Callable[..., bool]:
    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            qapp.processEvents()
            if predicate():
                return True
            time.sleep(0.01)
        qapp.processEvents()
        return predicate()

    return _wait


@pytest.fixture
def make_client() -> Callable[..., FakeRemoteClient]:
    return FakeRemoteClient.from_tree
