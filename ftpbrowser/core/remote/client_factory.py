from __future__ import annotations

import logging

from core.profiles.models import Profile
from core.remote.client_base import RemoteClient
from core.remote.ftp_client import FTPClient


def create_client(
    profile: Profile,
    password: str,
    logger: logging.Logger,
    timeout_seconds: float = 12.0,
) -> RemoteClient:
    protocol = profile.protocol.lower()
    if protocol in {"ftp", "ftps"}:
        return FTPClient(profile=profile, password=password, timeout_seconds=timeout_seconds)

    logger.error("Unsupported profile protocol: %s", protocol)
    raise ValueError(f"Unsupported protocol: {protocol}")
