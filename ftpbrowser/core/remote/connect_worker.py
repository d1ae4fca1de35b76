from __future__ import annotations

import asyncio
import logging

from PySide6.QtCore import QObject, Signal, Slot

from core.remote.client_base import RemoteClient


class ConnectWorker(QObject):
    finished = Signal(bool, str)
    failed = Signal(str)

    def __init__(self, client: RemoteClient, logger: logging.Logger) -> None:
        super().__init__()
        self._client = client
        self._logger = logger

    @Slot()
    def run(self) -> None:
        try:
            success, message = asyncio.run(self._client.test_connection())
            if not success:
                self._logger.warning("Connection test failed: %s", message)
            self.finished.emit(success, message)
        except Exception as error:
            self.failed.emit(str(error))
