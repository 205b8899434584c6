from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from wizard.draft_indicator import DraftIndicatorState, build_draft_indicator, format_last_saved

UTC = timezone.utc
NOW = datetime(2025, 3, 14, 16, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    ("saved_at", "lang", "expected"),
    [
        (datetime(2025, 3, 14, 9, 5, tzinfo=UTC), "de", "heute, 09:05"),
        (datetime(2025, 3, 14, 9, 5, tzinfo=UTC), "en", "today, 09:05"),
        (datetime(2025, 3, 13, 23, 59, tzinfo=UTC), "de", "gestern, 23:59"),
        (datetime(2025, 2, 3, 17, 45, tzinfo=UTC), "de", "03.02.2025, 17:45"),
    ],
)
def test_format_last_saved(saved_at: datetime, lang: str, expected: str) -> None:
    assert format_last_saved(saved_at, now=NOW, lang=lang, tz=UTC) == expected


def test_format_last_saved_uses_local_calendar_days() -> None:
    zurich_winter = timezone(timedelta(hours=1))
    saved_at = datetime(2025, 3, 13, 23, 30, tzinfo=UTC)

    assert format_last_saved(saved_at, now=NOW, lang="de", tz=zurich_winter) == "heute, 00:30"


def test_indicator_hidden_without_draft(make_wizard) -> None:
    indicator = build_draft_indicator(make_wizard())

    assert indicator.state is DraftIndicatorState.HIDDEN
    assert not indicator.visible


def test_indicator_after_save(make_wizard, wall_clock) -> None:
    wizard = make_wizard()
    wizard.update_field("title", "Hallo Welt")
    wizard.flush_draft()

    indicator = build_draft_indicator(wizard, now=wall_clock.value + timedelta(minutes=1), tz=UTC)

    assert indicator.state is DraftIndicatorState.SAVED
    assert indicator.label == "Gespeichert"
    assert indicator.saved_at_label == "heute, 09:30"
    assert indicator.can_discard


def test_indicator_while_saving(make_wizard) -> None:
    wizard = make_wizard()
    seen = []
    wizard.add_save_listener(lambda status: seen.append(build_draft_indicator(wizard, lang="en")))

    wizard.update_field("title", "Hallo Welt")
    wizard.flush_draft()

    assert seen[0].state is DraftIndicatorState.SAVING
    assert seen[0].label == "Saving…"
    assert seen[-1].state is DraftIndicatorState.SAVED


def test_indicator_for_draft_without_timestamp() -> None:
    wizard = SimpleNamespace(is_saving=False, has_draft=True, last_saved_at=None, lang="de")

    indicator = build_draft_indicator(wizard)  # type: ignore[arg-type]

    assert indicator.state is DraftIndicatorState.EXISTS
    assert indicator.label == "Entwurf vorhanden"
