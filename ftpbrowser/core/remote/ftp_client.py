from __future__ import annotations

import asyncio
import ssl
from dataclasses import dataclass

import aioftp

from core.listing import remote_paths
from core.profiles.models import Profile
from core.remote.client_base import BinarySink, ProgressCallback


@dataclass(slots=True)
class FTPClient:
    profile: Profile
    password: str
    timeout_seconds: float = 12.0
    encoding: str = "utf-8"

    async def test_connection(self) -> tuple[bool, str]:
        remote_path = remote_paths.normalize(self.profile.remote_path, directory=True)
        try:
            async with self._open_client() as client:
                await asyncio.wait_for(client.list(remote_path).__anext__(), timeout=self.timeout_seconds)
            return True, "ok"
        except StopAsyncIteration:
            return True, "ok"
        except Exception as error:
            return False, str(error)

    async def list_raw(self, remote_path: str) -> tuple[bool, str, list[str]]:
        target = remote_paths.normalize(remote_path, directory=True)
        lines: list[str] = []
        try:
            async with self._open_client() as client:
                async with client.get_stream(f"LIST {target}", "1xx", conn_type="A") as stream:
                    async for raw_line in stream.iter_by_line():
                        line = raw_line.decode(self.encoding, errors="replace").rstrip("\r\n")
                        if line.strip() != "":
                            lines.append(line)
            return True, "ok", lines
        except Exception as error:
            return False, str(error), []

    async def fetch(
        self,
        remote_path: str,
        sink: BinarySink,
        on_progress: ProgressCallback | None = None,
    ) -> tuple[bool, str, int]:
        target = remote_paths.normalize(remote_path)
        total = 0
        try:
            async with self._open_client() as client:
                async with client.download_stream(target) as stream:
                    async for chunk in stream.iter_by_block():
                        sink.write(chunk)
                        total += len(chunk)
                        if on_progress is not None:
                            on_progress(total, 0)
            return True, "ok", total
        except Exception as error:
            return False, str(error), total

    def _ssl_context(self) -> ssl.SSLContext | None:
        if self.profile.protocol != "ftps":
            return None
        return ssl.create_default_context()

    def _open_client(self):
        return aioftp.Client.context(
            host=self.profile.host,
            port=self.profile.port,
            user=self.profile.username,
            password=self.password,
            ssl=self._ssl_context(),
            connection_timeout=self.timeout_seconds,
            socket_timeout=self.timeout_seconds,
            path_timeout=self.timeout_seconds,
            encoding=self.encoding,
        )
