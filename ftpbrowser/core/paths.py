from __future__ import annotations

import os
from pathlib import Path
import sys

APP_NAME = "FTPBrowser"


def _user_config_base() -> Path:
    if os.name == "nt":
        appdata = os.getenv("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg_config = os.getenv("XDG_CONFIG_HOME")
    return Path(xdg_config) if xdg_config else Path.home() / ".config"


def get_app_data_dir() -> Path:
    app_data_dir = _user_config_base() / APP_NAME
    app_data_dir.mkdir(parents=True, exist_ok=True)
    return app_data_dir.resolve()


def get_logs_dir() -> Path:
    logs_dir = get_app_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_config_path() -> Path:
    return get_app_data_dir() / "config.json"


def get_default_download_dir() -> Path:
    """``Downloads`` in the user's home; not created until something is saved there."""
    if os.name == "nt" and os.getenv("USERPROFILE"):
        return Path(os.environ["USERPROFILE"]) / "Downloads"
    return Path.home() / "Downloads"


def get_bundle_root() -> Path:
    # PyInstaller unpacks bundled data into _MEIPASS.
    bundle_dir = getattr(sys, "_MEIPASS", None)
    if bundle_dir:
        return Path(bundle_dir)
    return Path(__file__).resolve().parent.parent


def ensure_runtime_directories() -> None:
    get_logs_dir()
