from __future__ import annotations

import asyncio

import pytest

from core.browser.browser_service import ListingError, RemoteBrowser
from core.browser.listing_worker import ListingWorker


def test_list_directory_parses_in_server_order(make_client) -> None:
    client = make_client({"zeta.txt": b"z", "alpha": {}, "beta.txt": b"bb"}, root="/pub/")
    browser = RemoteBrowser(client=client)

    entries = asyncio.run(browser.list_directory("/pub"))

    assert [(entry.name, entry.is_directory) for entry in entries] == [
        ("zeta.txt", False),
        ("alpha", True),
        ("beta.txt", False),
    ]
    assert client.listed == ["/pub/"]


def test_list_directory_failure_raises(make_client) -> None:
    client = make_client({}, root="/pub/")
    client.failing.add("/pub/")
    browser = RemoteBrowser(client=client)

    with pytest.raises(ListingError) as excinfo:
        asyncio.run(browser.list_directory("/pub/"))

    assert excinfo.value.remote_path == "/pub/"
    assert "550" in str(excinfo.value)


def test_listing_worker_emits_entries(qapp, make_client) -> None:
    client = make_client({"a.txt": b"a"}, root="/pub/")
    worker = ListingWorker(browser=RemoteBrowser(client=client), remote_path="/pub/")
    finished: list[tuple[str, object]] = []
    failed: list[tuple[str, str]] = []
    worker.finished.connect(lambda path, entries: finished.append((path, entries)))
    worker.failed.connect(lambda path, message: failed.append((path, message)))

    worker.run()

    assert failed == []
    assert finished[0][0] == "/pub/"
    assert [entry.name for entry in finished[0][1]] == ["a.txt"]


def test_listing_worker_reports_failure(qapp, make_client) -> None:
    worker = ListingWorker(browser=RemoteBrowser(client=make_client({})), remote_path="/missing/")
    failed: list[tuple[str, str]] = []
    worker.failed.connect(lambda path, message: failed.append((path, message)))

    worker.run()

    assert failed == [("/missing/", "550 No such directory")]
