"""Simple i18n helper utilities."""

from __future__ import annotations

from typing import Final

import streamlit as st

from constants.keys import StateKeys

LocalizedText = tuple[str, str]

DRAFT_SAVING: Final[LocalizedText] = ("Wird gespeichert…", "Saving…")
DRAFT_SAVED: Final[LocalizedText] = ("Gespeichert", "Saved")
DRAFT_EXISTS: Final[LocalizedText] = ("Entwurf vorhanden", "Draft available")
DRAFT_TODAY: Final[LocalizedText] = ("heute, {time}", "today, {time}")
DRAFT_YESTERDAY: Final[LocalizedText] = ("gestern, {time}", "yesterday, {time}")
DRAFT_RESTORED: Final[LocalizedText] = ("Entwurf wiederhergestellt", "Draft restored")
DRAFT_RESTORED_MESSAGE: Final[LocalizedText] = (
    "Deine Angaben wurden wiederhergestellt. Bitte wähle die Dateien erneut aus.",
    "Your details were restored. Please select your files again.",
)
VALIDATION_MORE_ERRORS: Final[LocalizedText] = (
    "+{count} weitere",
    "+{count} more",
)


def tr(de: str, en: str, lang: str | None = None) -> str:
    """Return the string matching the current language.

    Args:
        de: German text.
        en: English text.
        lang: Optional language override (``"de"`` or ``"en"``). When omitted
            the session language is used.

    Returns:
        The localized string for the requested language.
    """
    code = lang or st.session_state.get(StateKeys.LANG, "de")
    return de if code == "de" else en


def resolve_text(text: LocalizedText, lang: str | None = None, **values: object) -> str:
    """Resolve a ``(de, en)`` pair and apply ``str.format`` placeholders."""

    de, en = text
    resolved = tr(de, en, lang=lang)
    return resolved.format(**values) if values else resolved


__all__ = [
    "DRAFT_EXISTS",
    "DRAFT_RESTORED",
    "DRAFT_RESTORED_MESSAGE",
    "DRAFT_SAVED",
    "DRAFT_SAVING",
    "DRAFT_TODAY",
    "DRAFT_YESTERDAY",
    "LocalizedText",
    "VALIDATION_MORE_ERRORS",
    "resolve_text",
    "tr",
]
