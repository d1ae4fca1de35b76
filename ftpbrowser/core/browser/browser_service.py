from __future__ import annotations

import logging

from core.listing import remote_paths
from core.listing.models import Entry, FallbackPolicy
from core.listing.parser import ListingParser
from core.remote.client_base import RemoteClient


class ListingError(RuntimeError):
    def __init__(self, remote_path: str, message: str) -> None:
        super().__init__(message)
        self.remote_path = remote_path


class RemoteBrowser:
    def __init__(
        self,
        client: RemoteClient,
        fallback_policy: FallbackPolicy = FallbackPolicy.SKIP,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger("ftpbrowser.browser")
        self._parser = ListingParser(fallback_policy=fallback_policy, logger=self._logger)

    async def list_directory(self, remote_path: str) -> list[Entry]:
        target = remote_paths.normalize(remote_path, directory=True)
        self._logger.info("Listing remote directory: %s", target)

        success, message, lines = await self._client.list_raw(target)
        if not success:
            self._logger.warning("Listing failed for %s: %s", target, message)
            raise ListingError(target, message)

        return self._parser.parse(lines)
