"""Key-value slots that hold serialized upload drafts.

Backends store plain strings, like browser ``localStorage``. Every backend
failure surfaces as :class:`~core.errors.DraftStorageError`; the persistence
layer decides what to do with it.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import MutableMapping
from pathlib import Path
from typing import Protocol

import streamlit as st

from config import StorageBackend, WizardSettings
from core.errors import DraftStorageError

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


class DraftStorage(Protocol):
    """Minimal string key-value interface."""

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryDraftStorage:
    """Process-local storage, mostly for tests and previews."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class SessionStateDraftStorage:
    """Store drafts inside ``st.session_state`` for the lifetime of the browser session."""

    def __init__(self, namespace: str, session_state: MutableMapping[str, object] | None = None) -> None:
        self._namespace = namespace
        self._session_state = session_state

    @property
    def _state(self) -> MutableMapping[str, object]:
        return self._session_state if self._session_state is not None else st.session_state

    def _slots(self) -> dict[str, str]:
        slots = self._state.get(self._namespace)
        if not isinstance(slots, dict):
            slots = {}
            self._state[self._namespace] = slots
        return slots

    def read(self, key: str) -> str | None:
        value = self._slots().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        self._slots()[key] = value

    def remove(self, key: str) -> None:
        self._slots().pop(key, None)


class JsonFileDraftStorage:
    """Store each key as ``<directory>/<key>.json``; writes are atomic."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, key: str) -> Path:
        safe = _UNSAFE_KEY_CHARS.sub("_", key).strip("._") or "draft"
        return self.directory / f"{safe}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise DraftStorageError(f"Cannot read draft file {path}") from exc

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise DraftStorageError(f"Cannot write draft file {path}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def remove(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise DraftStorageError(f"Cannot remove draft file {path}") from exc


def build_storage(
    settings: WizardSettings,
    *,
    session_state: MutableMapping[str, object] | None = None,
    namespace: str = "draft_store",
) -> DraftStorage:
    """Instantiate the backend selected in ``settings``."""

    backend = settings.draft_storage_backend
    if backend is StorageBackend.MEMORY:
        return MemoryDraftStorage()
    if backend is StorageBackend.SESSION:
        return SessionStateDraftStorage(namespace, session_state)
    logger.debug("Using file draft storage in %s", settings.draft_storage_dir)
    return JsonFileDraftStorage(settings.draft_storage_dir)


__all__ = [
    "DraftStorage",
    "JsonFileDraftStorage",
    "MemoryDraftStorage",
    "SessionStateDraftStorage",
    "build_storage",
]
