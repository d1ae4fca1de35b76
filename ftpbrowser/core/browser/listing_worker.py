from __future__ import annotations

import asyncio

from PySide6.QtCore import QObject, Signal, Slot

from core.browser.browser_service import RemoteBrowser


class ListingWorker(QObject):
    finished = Signal(str, object)
    failed = Signal(str, str)

    def __init__(self, browser: RemoteBrowser, remote_path: str) -> None:
        super().__init__()
        self._browser = browser
        self._remote_path = remote_path

    @Slot()
    def run(self) -> None:
        try:
            entries = asyncio.run(self._browser.list_directory(self._remote_path))
            self.finished.emit(self._remote_path, entries)
        except Exception as error:
            self.failed.emit(self._remote_path, str(error))
