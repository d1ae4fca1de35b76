from __future__ import annotations

import logging
from pathlib import Path
import threading
from typing import Callable

from core.listing import remote_paths
from core.listing.models import FallbackPolicy
from core.listing.parser import ListingParser
from core.remote.client_base import RemoteClient
from core.transfers.execute_local import ensure_dir
from core.transfers.transfer_models import TransferTask, WalkFailure, WalkFailureKind, WalkResult

EnqueueFn = Callable[[TransferTask], None]


class DirectoryWalker:
    """Depth-first enumeration of a remote tree into transfer tasks.

    Local directories are created while walking, before any of their children
    are enqueued, so a file task never lands in a directory that does not
    exist yet regardless of how far the driver has drained the queue. Each
    visited directory still gets its own directory task for progress
    reporting.
    """

    MAX_DEPTH = 64

    def __init__(
        self,
        client: RemoteClient,
        fallback_policy: FallbackPolicy = FallbackPolicy.SKIP,
        logger: logging.Logger | None = None,
        cancel_event: threading.Event | None = None,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        self._client = client
        self._logger = logger or logging.getLogger("ftpbrowser.transfers")
        self._parser = ListingParser(fallback_policy=fallback_policy, logger=self._logger)
        self._cancel_event = cancel_event or threading.Event()
        self._max_depth = max(0, int(max_depth))

    @property
    def cancel_event(self) -> threading.Event:
        return self._cancel_event

    async def walk(self, remote_dir: str, local_dir: Path, enqueue: EnqueueFn) -> WalkResult:
        root = remote_paths.normalize(remote_dir, directory=True)
        result = WalkResult(remote_root=root)

        self._logger.info("Walking remote tree: %s -> %s", root, local_dir)
        await self._walk_branch(root, Path(local_dir), enqueue, result, depth=0)

        self._logger.info(
            "Walk finished: root=%s directories=%s files=%s failures=%s cancelled=%s",
            root,
            result.directories,
            result.files,
            len(result.failures),
            result.cancelled,
        )
        return result

    async def _walk_branch(
        self,
        remote_dir: str,
        local_dir: Path,
        enqueue: EnqueueFn,
        result: WalkResult,
        depth: int,
    ) -> None:
        if self._cancel_event.is_set():
            result.cancelled = True
            return

        if depth > self._max_depth:
            self._logger.warning("Walk depth limit %s reached at %s", self._max_depth, remote_dir)
            result.failures.append(
                WalkFailure(
                    remote_path=remote_dir,
                    local_path=local_dir,
                    kind=WalkFailureKind.DEPTH_LIMIT,
                    message=f"depth limit {self._max_depth} exceeded",
                )
            )
            return

        try:
            ensure_dir(local_dir)
        except OSError as error:
            self._logger.warning("Cannot create local directory %s: %s", local_dir, error)
            result.failures.append(
                WalkFailure(
                    remote_path=remote_dir,
                    local_path=local_dir,
                    kind=WalkFailureKind.LOCAL_DIR,
                    message=str(error),
                )
            )
            return

        enqueue(TransferTask(remote_path=remote_dir, local_path=local_dir, is_directory=True))
        result.directories += 1

        success, message, lines = await self._client.list_raw(remote_dir)
        if not success:
            self._logger.warning("Listing failed for %s: %s", remote_dir, message)
            result.failures.append(
                WalkFailure(
                    remote_path=remote_dir,
                    local_path=local_dir,
                    kind=WalkFailureKind.LISTING,
                    message=message,
                )
            )
            return

        for entry in self._parser.parse(lines):
            if self._cancel_event.is_set():
                result.cancelled = True
                return

            child_remote = remote_paths.join(remote_dir, entry.name, directory=entry.is_directory)
            child_local = local_dir / entry.name

            if entry.is_directory:
                await self._walk_branch(child_remote, child_local, enqueue, result, depth + 1)
                continue

            enqueue(
                TransferTask(
                    remote_path=child_remote,
                    local_path=child_local,
                    is_directory=False,
                    size_bytes=entry.size_bytes,
                    display_name=entry.name,
                )
            )
            result.files += 1
