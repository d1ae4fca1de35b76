from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from core.listing import remote_paths
from core.listing.models import FallbackPolicy
from core.logging import parse_level
from core.paths import get_config_path, get_default_download_dir


class AppConfig:
    _SUPPORTED_PROTOCOLS = {"ftp", "ftps"}
    _SUPPORTED_LANGUAGES = {"en", "de"}

    _DEFAULTS: dict[str, Any] = {
        "language": "en",
        "host": "",
        "port": 21,
        "username": "anonymous",
        "protocol": "ftp",
        "remote_path": "/",
        "download_dir": str(get_default_download_dir()),
        "tick_interval_ms": 100,
        "timeout_seconds": 12.0,
        "listing_fallback": FallbackPolicy.SKIP.value,
        "log_level": "INFO",
    }

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path or get_config_path()
        self._data: dict[str, Any] = {}
        self._load_or_create()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load_or_create(self) -> None:
        if not self._config_path.exists():
            self._data = dict(self._DEFAULTS)
            self.save()
            return

        try:
            content = self._config_path.read_text(encoding="utf-8")
            loaded = json.loads(content)
            if not isinstance(loaded, dict):
                loaded = {}
        except (json.JSONDecodeError, OSError):
            loaded = {}

        self._data = dict(self._DEFAULTS)
        self._data.update(loaded)

        protocol = str(self._data.get("protocol", "")).strip().lower()
        if protocol not in self._SUPPORTED_PROTOCOLS:
            protocol = self._DEFAULTS["protocol"]
        self._data["protocol"] = protocol

        language = str(self._data.get("language", "")).strip().lower()
        if language not in self._SUPPORTED_LANGUAGES:
            language = self._DEFAULTS["language"]
        self._data["language"] = language

        self._data["port"] = self._clamp_int(self._data.get("port"), self._DEFAULTS["port"], 1, 65535)
        self._data["tick_interval_ms"] = self._clamp_int(
            self._data.get("tick_interval_ms"), self._DEFAULTS["tick_interval_ms"], 0, 10000
        )
        self._data["listing_fallback"] = FallbackPolicy.from_value(self._data.get("listing_fallback")).value
        self._data["remote_path"] = remote_paths.normalize(str(self._data.get("remote_path") or "/"), directory=True)
        self._data["log_level"] = logging.getLevelName(parse_level(self._data.get("log_level")))

        try:
            timeout = float(self._data.get("timeout_seconds", self._DEFAULTS["timeout_seconds"]))
        except (TypeError, ValueError):
            timeout = self._DEFAULTS["timeout_seconds"]
        self._data["timeout_seconds"] = timeout if timeout > 0 else self._DEFAULTS["timeout_seconds"]

        self.save()

    def _clamp_int(self, value: Any, default: int, minimum: int, maximum: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        if number < minimum or number > maximum:
            return default
        return number

    def save(self) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.save()

    def get_language(self) -> str:
        return str(self._data.get("language", self._DEFAULTS["language"]))

    def set_language(self, language: str) -> None:
        self._data["language"] = language
        self.save()

    def get_host(self) -> str:
        return str(self._data.get("host", self._DEFAULTS["host"]))

    def get_port(self) -> int:
        return int(self._data.get("port", self._DEFAULTS["port"]))

    def get_username(self) -> str:
        return str(self._data.get("username", self._DEFAULTS["username"]))

    def get_protocol(self) -> str:
        return str(self._data.get("protocol", self._DEFAULTS["protocol"]))

    def get_remote_path(self) -> str:
        return str(self._data.get("remote_path", self._DEFAULTS["remote_path"]))

    def set_connection(self, host: str, port: int, username: str, protocol: str) -> None:
        self._data["host"] = host.strip()
        self._data["port"] = self._clamp_int(port, self._DEFAULTS["port"], 1, 65535)
        self._data["username"] = username.strip()
        self._data["protocol"] = protocol if protocol in self._SUPPORTED_PROTOCOLS else self._DEFAULTS["protocol"]
        self.save()

    def get_download_dir(self) -> str:
        return str(self._data.get("download_dir", self._DEFAULTS["download_dir"]))

    def set_download_dir(self, path: str) -> None:
        self._data["download_dir"] = str(path)
        self.save()

    def get_tick_interval_ms(self) -> int:
        return int(self._data.get("tick_interval_ms", self._DEFAULTS["tick_interval_ms"]))

    def get_timeout_seconds(self) -> float:
        return float(self._data.get("timeout_seconds", self._DEFAULTS["timeout_seconds"]))

    def get_listing_fallback(self) -> FallbackPolicy:
        return FallbackPolicy.from_value(self._data.get("listing_fallback"))

    def set_listing_fallback(self, policy: FallbackPolicy) -> None:
        self._data["listing_fallback"] = FallbackPolicy(policy).value
        self.save()

    def get_log_level(self) -> int:
        return parse_level(self._data.get("log_level"))
