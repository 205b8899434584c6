"""Central configuration for the upload wizard.

Settings resolve from Streamlit secrets first and fall back to environment
variables (a local ``.env`` file is loaded on import). The draft storage key is
only a default here; the persistence layer always receives it explicitly so
tests and parallel wizards can use their own slots.
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any

import streamlit as st
from dotenv import load_dotenv

from constants.keys import DraftKeys

load_dotenv()

logger = logging.getLogger(__name__)


DEFAULT_DEBOUNCE_SECONDS = 0.5
DEFAULT_SERVER_DEBOUNCE_SECONDS = 2.0
DEFAULT_SERVER_TIMEOUT = 5.0
DEFAULT_STORAGE_DIR = Path.home() / ".currico" / "drafts"
SUPPORTED_LANGS: tuple[str, ...] = ("de", "en")


class StorageBackend(StrEnum):
    """Enumerate the supported draft storage backends."""

    FILE = "file"
    SESSION = "session"
    MEMORY = "memory"


def _coerce_secret_value(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8").strip()
        except UnicodeDecodeError:
            return ""
    return str(value).strip()


def get_setting(name: str, default: str | None = None) -> str | None:
    """Return ``name`` from Streamlit secrets or the environment.

    Empty values count as missing so ``FOO=`` in a ``.env`` file does not
    shadow the default.
    """

    try:
        secret = st.secrets[name]
    except Exception:
        secret = None
    value = _coerce_secret_value(secret)
    if value:
        return value
    env_value = _coerce_secret_value(os.getenv(name))
    if env_value:
        return env_value
    return default


def _parse_positive_float(value: str | None, *, env_var: str, default: float) -> float:
    """Return a positive float parsed from ``value`` or ``default``."""

    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        warnings.warn(
            "%s is not a number; using %s=%s" % (value, env_var, default),
            RuntimeWarning,
        )
        return default
    if parsed <= 0:
        warnings.warn(
            "%s must be positive; using %s=%s" % (value, env_var, default),
            RuntimeWarning,
        )
        return default
    return parsed


def _parse_backend(value: str | None) -> StorageBackend:
    if value is None:
        return StorageBackend.FILE
    try:
        return StorageBackend(value.strip().lower())
    except ValueError:
        warnings.warn(
            "Unsupported DRAFT_STORAGE_BACKEND '%s'; falling back to 'file'." % value,
            RuntimeWarning,
        )
        return StorageBackend.FILE


def _parse_lang(value: str | None) -> str:
    candidate = (value or "de").strip().lower()
    if candidate not in SUPPORTED_LANGS:
        logger.info("Unsupported WIZARD_LANG '%s'; using 'de'.", value)
        return "de"
    return candidate


@dataclass(frozen=True)
class WizardSettings:
    """Resolved configuration for a wizard instance."""

    draft_storage_key: str = DraftKeys.STORAGE_KEY
    draft_debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    draft_storage_backend: StorageBackend = StorageBackend.FILE
    draft_storage_dir: Path = DEFAULT_STORAGE_DIR
    draft_server_url: str | None = None
    draft_server_token: str | None = None
    draft_server_debounce_seconds: float = DEFAULT_SERVER_DEBOUNCE_SECONDS
    draft_server_timeout: float = DEFAULT_SERVER_TIMEOUT
    default_lang: str = "de"

    @property
    def remote_sync_enabled(self) -> bool:
        return bool(self.draft_server_url)

    def as_dict(self) -> dict[str, Any]:
        data = {
            "draft_storage_key": self.draft_storage_key,
            "draft_debounce_seconds": self.draft_debounce_seconds,
            "draft_storage_backend": self.draft_storage_backend.value,
            "draft_storage_dir": str(self.draft_storage_dir),
            "draft_server_url": self.draft_server_url,
            "draft_server_debounce_seconds": self.draft_server_debounce_seconds,
            "draft_server_timeout": self.draft_server_timeout,
            "default_lang": self.default_lang,
        }
        # never echo the bearer token
        data["draft_server_token"] = "***" if self.draft_server_token else None
        return data


def load_wizard_settings() -> WizardSettings:
    """Resolve :class:`WizardSettings` from secrets and environment variables."""

    storage_dir = get_setting("DRAFT_STORAGE_DIR")
    server_url = get_setting("DRAFT_SERVER_URL")
    return WizardSettings(
        draft_storage_key=get_setting("DRAFT_STORAGE_KEY", DraftKeys.STORAGE_KEY) or DraftKeys.STORAGE_KEY,
        draft_debounce_seconds=_parse_positive_float(
            get_setting("DRAFT_DEBOUNCE_SECONDS"),
            env_var="DRAFT_DEBOUNCE_SECONDS",
            default=DEFAULT_DEBOUNCE_SECONDS,
        ),
        draft_storage_backend=_parse_backend(get_setting("DRAFT_STORAGE_BACKEND")),
        draft_storage_dir=Path(storage_dir).expanduser() if storage_dir else DEFAULT_STORAGE_DIR,
        draft_server_url=server_url.rstrip("/") if server_url else None,
        draft_server_token=get_setting("DRAFT_SERVER_TOKEN"),
        draft_server_debounce_seconds=_parse_positive_float(
            get_setting("DRAFT_SERVER_DEBOUNCE_SECONDS"),
            env_var="DRAFT_SERVER_DEBOUNCE_SECONDS",
            default=DEFAULT_SERVER_DEBOUNCE_SECONDS,
        ),
        draft_server_timeout=_parse_positive_float(
            get_setting("DRAFT_SERVER_TIMEOUT"),
            env_var="DRAFT_SERVER_TIMEOUT",
            default=DEFAULT_SERVER_TIMEOUT,
        ),
        default_lang=_parse_lang(get_setting("WIZARD_LANG")),
    )


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "DEFAULT_SERVER_DEBOUNCE_SECONDS",
    "StorageBackend",
    "WizardSettings",
    "get_setting",
    "load_wizard_settings",
]
