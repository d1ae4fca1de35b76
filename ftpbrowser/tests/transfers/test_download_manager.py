from __future__ import annotations

from pathlib import Path
import threading

import pytest

from core.transfers.download_manager import DownloadManager
from core.transfers.transfer_models import DrainSummary, WalkResult


def _collect(manager: DownloadManager) -> tuple[list[DrainSummary], list[WalkResult]]:
    summaries: list[DrainSummary] = []
    walks: list[WalkResult] = []
    manager.all_finished.connect(summaries.append)
    manager.walk_finished.connect(walks.append)
    return summaries, walks


def test_directory_download_end_to_end(qapp, wait_until, make_client, tmp_path: Path) -> None:
    client = make_client(
        {"docs": {"guide.txt": b"read me", "img": {"logo.png": b"\x89PNG"}}, "top.txt": b"top"},
        root="/data/",
    )
    manager = DownloadManager(client=client, tick_interval_ms=0)
    summaries, walks = _collect(manager)
    try:
        manager.download_selection(remote_path="/data/", local_path=tmp_path / "data", is_directory=True)

        assert wait_until(lambda: bool(summaries) and not manager.is_busy())
    finally:
        manager.shutdown()

    target = tmp_path / "data"
    assert (target / "docs" / "guide.txt").read_bytes() == b"read me"
    assert (target / "docs" / "img" / "logo.png").read_bytes() == b"\x89PNG"
    assert (target / "top.txt").read_bytes() == b"top"
    assert len(walks) == 1
    assert walks[0].success is True
    assert walks[0].files == 3
    assert summaries[-1].failed == 0
    assert manager.pending_count() == 0


def test_single_file_download(qapp, wait_until, make_client, tmp_path: Path) -> None:
    client = make_client({"a.txt": b"payload"}, root="/pub/")
    manager = DownloadManager(client=client, tick_interval_ms=0)
    summaries, walks = _collect(manager)
    try:
        manager.download_selection(
            remote_path="/pub/a.txt",
            local_path=tmp_path / "saved.txt",
            is_directory=False,
            size_hint=7,
        )

        assert wait_until(lambda: bool(summaries))
    finally:
        manager.shutdown()

    assert (tmp_path / "saved.txt").read_bytes() == b"payload"
    assert walks == []
    assert summaries[0].succeeded == 1


def test_partial_walk_still_downloads_reachable_files(qapp, wait_until, make_client, tmp_path: Path) -> None:
    client = make_client({"locked": {"secret.txt": b"s"}, "open.txt": b"o"}, root="/data/")
    client.failing.add("/data/locked/")
    manager = DownloadManager(client=client, tick_interval_ms=0)
    summaries, walks = _collect(manager)
    try:
        manager.download_selection(remote_path="/data/", local_path=tmp_path / "data", is_directory=True)

        assert wait_until(lambda: bool(summaries) and bool(walks) and not manager.is_busy())
    finally:
        manager.shutdown()

    assert (tmp_path / "data" / "open.txt").read_bytes() == b"o"
    assert not (tmp_path / "data" / "locked" / "secret.txt").exists()
    assert walks[0].success is False
    assert walks[0].failures[0].remote_path == "/data/locked/"


def test_cancel_all_empties_queue(qapp, wait_until, make_client, tmp_path: Path) -> None:
    tree = {f"file{index}.txt": b"x" * 32 for index in range(20)}
    client = make_client(tree, root="/bulk/", chunk_size=1)
    manager = DownloadManager(client=client, tick_interval_ms=50)
    summaries, _walks = _collect(manager)
    try:
        manager.download_selection(remote_path="/bulk/", local_path=tmp_path / "bulk", is_directory=True)
        manager.cancel_all()

        assert wait_until(lambda: bool(summaries) and not manager.is_busy())
    finally:
        manager.shutdown()

    assert manager.pending_count() == 0
    assert summaries[-1].cancelled is True
    assert len(client.fetched) < len(tree)


def test_download_after_shutdown_is_rejected(qapp, make_client, tmp_path: Path) -> None:
    manager = DownloadManager(client=make_client({}), tick_interval_ms=0)
    manager.shutdown()

    with pytest.raises(RuntimeError):
        manager.download_selection(remote_path="/a.txt", local_path=tmp_path / "a.txt", is_directory=False)


def test_late_cancelled_walk_keeps_newer_download(qapp, wait_until, make_client, tmp_path: Path) -> None:
    new_files = {f"n{index}.txt": f"new {index}".encode() for index in range(5)}
    client = make_client({"old": {"stale.txt": b"stale"}, "new": new_files})
    old_listing_gate = threading.Event()
    client.gates["/old/"] = old_listing_gate
    manager = DownloadManager(client=client, tick_interval_ms=200)
    summaries, walks = _collect(manager)
    try:
        manager.download_selection(remote_path="/old/", local_path=tmp_path / "old", is_directory=True)
        assert wait_until(lambda: "/old/" in client.listed)

        manager.cancel_all()
        manager.download_selection(remote_path="/new/", local_path=tmp_path / "new", is_directory=True)
        assert wait_until(lambda: any(walk.remote_root == "/new/" for walk in walks))

        old_listing_gate.set()
        assert wait_until(lambda: len(walks) == 2, timeout=10.0)
        assert wait_until(lambda: not manager.is_busy(), timeout=10.0)
    finally:
        old_listing_gate.set()
        manager.shutdown()

    for name, payload in new_files.items():
        assert (tmp_path / "new" / name).read_bytes() == payload
    assert not (tmp_path / "old" / "stale.txt").exists()
    assert summaries[-1].cancelled is False


def test_stale_drain_does_not_end_newer_request(qapp, wait_until, make_client, tmp_path: Path) -> None:
    client = make_client({"a.txt": b"payload"}, root="/pub/")
    manager = DownloadManager(client=client, tick_interval_ms=0)
    summaries, _walks = _collect(manager)
    busy_states: list[bool] = []
    manager.busy_changed.connect(busy_states.append)
    try:
        manager.download_selection(remote_path="/pub/a.txt", local_path=tmp_path / "a.txt", is_directory=False)

        # A drain from a run that finished before this request was picked up.
        manager.driver.queue_drained.emit(DrainSummary(), 0)

        assert summaries == []
        assert manager.is_busy() is True
        assert False not in busy_states

        assert wait_until(lambda: bool(summaries))
    finally:
        manager.shutdown()

    assert manager.is_busy() is False
    assert summaries[0].succeeded == 1
    assert busy_states == [True, False]
