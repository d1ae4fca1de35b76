from __future__ import annotations

import os
from pathlib import Path
import threading
import uuid

from core.remote.client_base import ProgressCallback, RemoteClient
from core.transfers.execute_local import CancellableSink, TransferCancelled


async def download_remote_file_to_local_atomic(
    client: RemoteClient,
    remote_path_file: str,
    local_path: Path,
    cancel_event: threading.Event,
    on_progress: ProgressCallback | None = None,
) -> int:
    target = Path(local_path)
    target.parent.mkdir(parents=True, exist_ok=True)

    temp_path = target.with_name(f"{target.name}.tmp-{uuid.uuid4().hex}")

    try:
        with temp_path.open("wb") as handle:
            sink = CancellableSink(handle, cancel_event)
            try:
                success, message, copied = await client.fetch(remote_path_file, sink, on_progress)
            finally:
                sink.close()

        if not success:
            if cancel_event.is_set():
                raise TransferCancelled(message)
            raise RuntimeError(message)
        os.replace(temp_path, target)
        return copied
    finally:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
