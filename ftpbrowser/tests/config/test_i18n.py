from __future__ import annotations

from i18n.i18n import I18nManager


def test_translations_loaded_for_both_languages() -> None:
    manager = I18nManager()
    manager.load_translations()

    assert manager.available_languages() == ["de", "en"]
    assert manager.translate("browser.type.file") == "File"

    manager.set_language("de", emit_signal=False)
    assert manager.translate("browser.type.file") == "Datei"


def test_unknown_key_and_language_fall_back() -> None:
    manager = I18nManager()
    manager.load_translations()
    manager.set_language("fr", emit_signal=False)

    assert manager.current_language == "en"
    assert manager.translate("does.not.exist") == "does.not.exist"
    assert manager.translate("connection.log.failed", error="timeout") == "Connection failed: timeout"


def test_custom_translations_dir_skips_broken_files(tmp_path) -> None:
    (tmp_path / "en.json").write_text('{"greeting": "Hello {name}"}', encoding="utf-8")
    (tmp_path / "nl.json").write_text("{broken", encoding="utf-8")
    (tmp_path / "fr.json").write_text('["not", "an", "object"]', encoding="utf-8")

    manager = I18nManager(translations_dir=tmp_path)
    manager.load_translations()

    assert manager.available_languages() == ["en"]
    assert manager.translate("greeting", name="Ada") == "Hello Ada"
    assert manager.translate("greeting") == "Hello {name}"
