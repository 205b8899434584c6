"""Upload wizard state: validation, touch tracking, navigation and the facade."""

from __future__ import annotations

import importlib
from typing import Any

from .touched import STEP_TOUCH_FIELDS, TOUCHABLE_FIELDS, TouchTracker
from .validation import FieldError, errors_for_step, is_step_complete, is_step_valid, validate_all

_LAZY_EXPORTS: dict[str, str] = {
    "UploadWizard": "upload_wizard",
    "StepStatus": "step_status",
    "StepProgress": "step_status",
    "build_step_statuses": "step_status",
    "DraftIndicator": "draft_indicator",
    "build_draft_indicator": "draft_indicator",
}

__all__ = [
    "FieldError",
    "STEP_TOUCH_FIELDS",
    "TOUCHABLE_FIELDS",
    "TouchTracker",
    "errors_for_step",
    "is_step_complete",
    "is_step_valid",
    "validate_all",
    *_LAZY_EXPORTS,
]


def __getattr__(name: str) -> Any:
    """Load the facade and its projections on first access.

    ``wizard.upload_wizard`` depends on :mod:`state`, which in turn binds the
    facade into the session, so it cannot be imported eagerly here.
    """

    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    value: Any = getattr(importlib.import_module(f"{__name__}.{module_name}"), name)
    globals()[name] = value
    return value
