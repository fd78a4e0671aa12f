from __future__ import annotations

import json
import os
import threading
from typing import Any

from loguru import logger

from services.app_config import get_app_config

I18N_PATH = "config/i18n/translations.json"
DEFAULT_LANGUAGE = "en"
SUPPORTED_LANGUAGES: list[dict[str, str]] = [
    {"code": "en", "label": "English"},
    {"code": "de", "label": "Deutsch"},
]
SUPPORTED_LANGUAGE_CODES = [entry["code"] for entry in SUPPORTED_LANGUAGES]

_DEFAULT_TRANSLATIONS: dict[str, dict[str, str]] = {
    "settings.title": {"en": "Settings", "de": "Einstellungen"},
    "settings.subtitle": {
        "en": "Manage recording server configuration.",
        "de": "Konfiguration des Aufnahmeservers verwalten.",
    },
    "settings.sections": {"en": "Sections", "de": "Bereiche"},
    "settings.select_hint": {
        "en": "Select a section from the tree.",
        "de": "Bereich im Baum auswählen.",
    },
    "settings.recording.title": {"en": "Recording", "de": "Aufnahme"},
    "timeshift.title": {"en": "Timeshift", "de": "Timeshift"},
    "timeshift.options": {"en": "Timeshift Options", "de": "Timeshift-Optionen"},
    "timeshift.enabled": {"en": "Enabled", "de": "Aktiviert"},
    "timeshift.ondemand": {"en": "On-Demand", "de": "Bei Bedarf"},
    "timeshift.path": {"en": "Storage Path", "de": "Speicherpfad"},
    "timeshift.max_period": {"en": "Max. Period (mins)", "de": "Max. Dauer (Min.)"},
    "timeshift.unlimited_period": {"en": "Unlimited time", "de": "Unbegrenzte Dauer"},
    "timeshift.max_size": {"en": "Max. Size (MB)", "de": "Max. Größe (MB)"},
    "timeshift.unlimited_size": {"en": "Unlimited size", "de": "Unbegrenzte Größe"},
    "timeshift.save": {"en": "Save configuration", "de": "Konfiguration speichern"},
    "timeshift.save_tooltip": {
        "en": "Save changes made to configuration below",
        "de": "Änderungen an der Konfiguration unten speichern",
    },
    "timeshift.help": {"en": "Help", "de": "Hilfe"},
    "timeshift.help_title": {"en": "Timeshift Configuration", "de": "Timeshift-Konfiguration"},
    "timeshift.saving": {"en": "Saving Data...", "de": "Daten werden gespeichert..."},
    "timeshift.save_failed": {"en": "Save failed", "de": "Speichern fehlgeschlagen"},
    "timeshift.load_failed": {
        "en": "Loading settings failed: {error}",
        "de": "Laden der Einstellungen fehlgeschlagen: {error}",
    },
    "timeshift.retry": {"en": "Retry", "de": "Erneut versuchen"},
    "timeshift.required": {"en": "Required", "de": "Pflichtfeld"},
    "common.close": {"en": "Close", "de": "Schließen"},
}

_i18n_lock = threading.RLock()
_loaded: dict[str, dict[str, str]] | None = None


def load_translations(path: str = I18N_PATH) -> dict[str, dict[str, str]]:
    """Built-in phrases merged with the optional override file (override wins)."""
    parsed: dict[str, dict[str, str]] = {key: dict(values) for key, values in _DEFAULT_TRANSLATIONS.items()}
    if not os.path.exists(path):
        return parsed
    with _i18n_lock:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    for key, values in raw.items():
        if not isinstance(values, dict):
            continue
        parsed.setdefault(key, {}).update({str(lang): str(text) for lang, text in values.items() if text})
    logger.debug(f"[load_translations] - overrides_loaded - path={path} keys={len(raw)}")
    return parsed


def _translations() -> dict[str, dict[str, str]]:
    global _loaded
    with _i18n_lock:
        if _loaded is None:
            _loaded = load_translations()
        return _loaded


def reset_translations() -> None:
    global _loaded
    with _i18n_lock:
        _loaded = None


def get_language() -> str:
    lang = str(get_app_config().ui.language or DEFAULT_LANGUAGE)
    if lang not in SUPPORTED_LANGUAGE_CODES:
        return DEFAULT_LANGUAGE
    return lang


def t(key: str, default: str | None = None, *, language: str | None = None, **kwargs: Any) -> str:
    translations = _translations()
    lang = str(language or get_language())
    if lang not in SUPPORTED_LANGUAGE_CODES:
        lang = DEFAULT_LANGUAGE
    text = translations.get(key, {}).get(lang)
    if not text:
        text = translations.get(key, {}).get(DEFAULT_LANGUAGE)
    if not text:
        logger.debug(f"[t] - missing_translation - key={key} lang={lang}")
        text = default if default is not None else key
    if kwargs:
        return text.format(**kwargs)
    return text
