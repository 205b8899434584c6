"""Helpers for computing the status shown in the wizard's step bar."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from models.listing import STEPS
from utils.i18n import VALIDATION_MORE_ERRORS, LocalizedText, resolve_text

if TYPE_CHECKING:
    from wizard.upload_wizard import UploadWizard

MAX_LISTED_ERRORS: Final[int] = 3

STEP_LABELS: Final[dict[int, LocalizedText]] = {
    1: ("Grunddaten", "Basics"),
    2: ("Lehrplan", "Curriculum"),
    3: ("Preis", "Price"),
    4: ("Dateien", "Files"),
}


class StepStatus(StrEnum):
    """Visual state of one step in the navigation bar."""

    CURRENT = "current"
    COMPLETE = "complete"
    WARNING = "warning"
    VISITED = "visited"
    LOCKED = "locked"


@dataclass(frozen=True)
class StepProgress:
    """Status of a wizard step plus the error summary for its tooltip."""

    step: int
    label: str
    status: StepStatus
    is_current: bool
    can_navigate: bool
    messages: tuple[str, ...] = field(default_factory=tuple)
    hidden_error_count: int = 0
    more_errors_label: str | None = None


def resolve_step_status(
    *,
    is_current: bool,
    is_visited: bool,
    is_complete: bool,
    is_valid: bool,
    error_count: int,
) -> StepStatus:
    """Return the status; a warning wins over completeness, which wins over current."""

    if is_visited and not is_valid and error_count > 0:
        return StepStatus.WARNING
    if is_complete and is_valid:
        return StepStatus.COMPLETE
    if is_current:
        return StepStatus.CURRENT
    if is_visited:
        return StepStatus.VISITED
    return StepStatus.LOCKED


def build_step_progress(wizard: "UploadWizard", step: int, *, lang: str | None = None) -> StepProgress:
    lang = lang or wizard.lang
    errors = wizard.errors_for_step(step, lang=lang)
    is_visited = wizard.can_navigate_to_step(step)
    is_current = step == wizard.current_step
    status = resolve_step_status(
        is_current=is_current,
        is_visited=is_visited,
        is_complete=wizard.is_step_complete(step),
        is_valid=not errors,
        error_count=len(errors),
    )
    hidden = max(len(errors) - MAX_LISTED_ERRORS, 0)
    return StepProgress(
        step=step,
        label=resolve_text(STEP_LABELS[step], lang),
        status=status,
        is_current=is_current,
        can_navigate=is_visited,
        # the tooltip is only rendered for steps the user can reach
        messages=tuple(error.message for error in errors[:MAX_LISTED_ERRORS]) if is_visited else (),
        hidden_error_count=hidden if is_visited else 0,
        more_errors_label=resolve_text(VALIDATION_MORE_ERRORS, lang, count=hidden) if is_visited and hidden else None,
    )


def build_step_statuses(wizard: "UploadWizard", *, lang: str | None = None) -> list[StepProgress]:
    """Return the step bar entries for all four steps in order."""

    return [build_step_progress(wizard, step, lang=lang) for step in STEPS]


__all__ = [
    "MAX_LISTED_ERRORS",
    "STEP_LABELS",
    "StepProgress",
    "StepStatus",
    "build_step_progress",
    "build_step_statuses",
    "resolve_step_status",
]
