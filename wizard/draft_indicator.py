"""Presentation state for the "draft saved" indicator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import StrEnum
from typing import TYPE_CHECKING

from state.autosave import utc_now
from utils.i18n import DRAFT_EXISTS, DRAFT_SAVED, DRAFT_SAVING, DRAFT_TODAY, DRAFT_YESTERDAY, resolve_text

if TYPE_CHECKING:
    from wizard.upload_wizard import UploadWizard


class DraftIndicatorState(StrEnum):
    HIDDEN = "hidden"
    SAVING = "saving"
    SAVED = "saved"
    EXISTS = "exists"


@dataclass(frozen=True)
class DraftIndicator:
    state: DraftIndicatorState
    label: str | None = None
    saved_at_label: str | None = None

    @property
    def visible(self) -> bool:
        return self.state is not DraftIndicatorState.HIDDEN

    @property
    def can_discard(self) -> bool:
        return self.visible


def format_last_saved(
    saved_at: datetime,
    *,
    now: datetime | None = None,
    lang: str | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Format ``saved_at`` as "heute, 14:05", "gestern, 09:30" or "03.02.2025, 17:45".

    Both timestamps are converted to ``tz`` (the local zone when omitted)
    before comparing calendar days.
    """

    local_saved = saved_at.astimezone(tz)
    local_now = (now or utc_now()).astimezone(tz)
    time_label = local_saved.strftime("%H:%M")
    if local_saved.date() == local_now.date():
        return resolve_text(DRAFT_TODAY, lang, time=time_label)
    if local_saved.date() == local_now.date() - timedelta(days=1):
        return resolve_text(DRAFT_YESTERDAY, lang, time=time_label)
    return local_saved.strftime("%d.%m.%Y, %H:%M")


def build_draft_indicator(
    wizard: "UploadWizard",
    *,
    now: datetime | None = None,
    lang: str | None = None,
    tz: tzinfo | None = None,
) -> DraftIndicator:
    lang = lang or wizard.lang
    if wizard.is_saving:
        return DraftIndicator(DraftIndicatorState.SAVING, resolve_text(DRAFT_SAVING, lang))
    if not wizard.has_draft:
        return DraftIndicator(DraftIndicatorState.HIDDEN)
    saved_at = wizard.last_saved_at
    if saved_at is None:
        return DraftIndicator(DraftIndicatorState.EXISTS, resolve_text(DRAFT_EXISTS, lang))
    return DraftIndicator(
        DraftIndicatorState.SAVED,
        resolve_text(DRAFT_SAVED, lang),
        format_last_saved(saved_at, now=now, lang=lang, tz=tz),
    )


__all__ = ["DraftIndicator", "DraftIndicatorState", "build_draft_indicator", "format_last_saved"]
