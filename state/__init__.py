"""Draft persistence and Streamlit session binding for the upload wizard."""

from __future__ import annotations

import importlib
from typing import Any

_LAZY_EXPORTS: dict[str, str] = {
    "DraftPersistence": "autosave",
    "SaveStatus": "autosave",
    "Debouncer": "debounce",
    "DraftServerClient": "remote_sync",
    "RemoteDraftSync": "remote_sync",
    "JsonFileDraftStorage": "storage",
    "MemoryDraftStorage": "storage",
    "SessionStateDraftStorage": "storage",
    "build_storage": "storage",
    "ensure_upload_wizard": "ensure_state",
    "reset_upload_wizard": "ensure_state",
    "use_upload_wizard": "ensure_state",
    "consume_restored_notice": "ensure_state",
}

__all__ = list(_LAZY_EXPORTS)


def __getattr__(name: str) -> Any:
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    value: Any = getattr(importlib.import_module(f"{__name__}.{module_name}"), name)
    globals()[name] = value
    return value
