from __future__ import annotations

import json
import logging
from pathlib import Path

from PySide6.QtCore import QObject, Signal

from core.paths import get_bundle_root

_logger = logging.getLogger("ftpbrowser.i18n")


def get_translations_dir() -> Path:
    return get_bundle_root() / "i18n" / "translations"


class I18nManager(QObject):
    """Key based lookup over ``translations/<language>.json`` files.

    A key missing in the active language is looked up in the fallback language
    and finally returned as-is, so an untranslated string never breaks the UI.
    """

    language_changed = Signal(str)

    def __init__(self, fallback_language: str = "en", translations_dir: Path | None = None) -> None:
        super().__init__()
        self._fallback_language = fallback_language
        self._language = fallback_language
        self._translations_dir = translations_dir
        self._catalogs: dict[str, dict[str, str]] = {}
        self._reported_missing: set[str] = set()

    @property
    def current_language(self) -> str:
        return self._language

    def load_translations(self) -> None:
        directory = self._translations_dir or get_translations_dir()
        self._catalogs = {}

        for catalog_path in sorted(directory.glob("*.json")):
            try:
                payload = json.loads(catalog_path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as error:
                _logger.warning("Skipping translation file %s: %s", catalog_path, error)
                continue
            if not isinstance(payload, dict):
                _logger.warning("Skipping translation file %s: not a JSON object", catalog_path)
                continue
            self._catalogs[catalog_path.stem] = {str(key): str(value) for key, value in payload.items()}

        if self._language not in self._catalogs:
            self._language = self._fallback_language

    def available_languages(self) -> list[str]:
        return sorted(self._catalogs)

    def set_language(self, language: str, emit_signal: bool = True) -> str:
        target = language if language in self._catalogs else self._fallback_language
        if target != self._language:
            self._language = target
            if emit_signal:
                self.language_changed.emit(target)
        return target

    def translate(self, key: str, **kwargs: object) -> str:
        template = self._catalogs.get(self._language, {}).get(key)
        if template is None:
            template = self._catalogs.get(self._fallback_language, {}).get(key)
        if template is None:
            if key not in self._reported_missing:
                self._reported_missing.add(key)
                _logger.debug("Missing translation key: %s", key)
            template = key

        if not kwargs:
            return template
        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return template


_manager = I18nManager()


def initialize_i18n(language: str) -> None:
    _manager.load_translations()
    _manager.set_language(language, emit_signal=False)


def get_i18n() -> I18nManager:
    return _manager


def tr(key: str, **kwargs: object) -> str:
    return _manager.translate(key, **kwargs)
