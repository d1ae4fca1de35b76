from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Profile:
    host: str
    port: int = 21
    username: str = "anonymous"
    protocol: str = "ftp"
    remote_path: str = "/"

    @property
    def display_name(self) -> str:
        return f"{self.protocol}://{self.username}@{self.host}:{self.port}"
