"""Tests for snapshot serialization and debounced draft writes."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from core.errors import DraftStorageError
from models.listing import ListingFormData
from state.autosave import (
    DraftPersistence,
    DraftState,
    SaveStatus,
    build_snapshot,
    deserialize_snapshot,
    serialize_snapshot,
)
from state.storage import MemoryDraftStorage

SAVED_AT = datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)


class FailingStorage:
    def __init__(self) -> None:
        self.writes = 0

    def read(self, key: str) -> str | None:
        raise DraftStorageError("storage disabled")

    def write(self, key: str, value: str) -> None:
        self.writes += 1
        raise DraftStorageError("quota exceeded")

    def remove(self, key: str) -> None:
        raise DraftStorageError("storage disabled")


def _state(**form_values) -> DraftState:
    return DraftState(form_data=ListingFormData(**form_values), current_step=2, visited_steps=(1, 2))


def test_snapshot_json_shape() -> None:
    snapshot = build_snapshot(
        ListingFormData(title="Brüche", lehrmittel_ids=["lm-1"]),
        current_step=2,
        visited_steps=[1, 2],
        saved_at=SAVED_AT,
    )

    payload = json.loads(serialize_snapshot(snapshot))

    assert set(payload) == {"formData", "currentStep", "visitedSteps", "lastSavedAt"}
    assert payload["formData"]["title"] == "Brüche"
    assert payload["formData"]["lehrmittelIds"] == ["lm-1"]
    assert payload["currentStep"] == 2
    assert payload["visitedSteps"] == [1, 2]
    assert payload["lastSavedAt"] == "2025-03-14T09:30:00+00:00"


def test_snapshot_round_trip() -> None:
    form = ListingFormData(
        title="Brüche üben",
        description="Arbeitsblatt mit Lösungen für die 5. Klasse.",
        cycle="2",
        subject="Mathematik",
        competencies=["MA.1.A.1"],
        price="2.50",
        editable=True,
        legal_own_content=True,
    )
    snapshot = build_snapshot(form, current_step=3, visited_steps=[1, 2, 3], saved_at=SAVED_AT)

    restored = deserialize_snapshot(serialize_snapshot(snapshot))

    assert restored is not None
    assert restored.form_data.model_dump() == form.model_dump()
    assert restored.current_step == 3
    assert restored.visited_steps == [1, 2, 3]
    assert restored.last_saved_at == SAVED_AT


def test_visited_steps_always_include_current_step() -> None:
    snapshot = build_snapshot(ListingFormData(), current_step=3, visited_steps=[2], saved_at=SAVED_AT)

    assert snapshot.visited_steps == [1, 2, 3]


@pytest.mark.parametrize(
    "raw",
    [
        None,
        "",
        "{not json",
        "[]",
        '"text"',
        '{"formData": {}, "currentStep": 7, "visitedSteps": [1], "lastSavedAt": "2025-01-01T00:00:00Z"}',
        '{"formData": {}, "currentStep": 1, "visitedSteps": [1]}',
        '{"formData": "x", "currentStep": 1, "visitedSteps": [1], "lastSavedAt": "2025-01-01T00:00:00Z"}',
    ],
)
def test_corrupt_or_foreign_data_is_no_draft(raw) -> None:
    assert deserialize_snapshot(raw) is None


def test_unknown_fields_are_ignored() -> None:
    raw = json.dumps(
        {
            "formData": {"title": "Hallo Welt", "futureField": 1},
            "currentStep": 1,
            "visitedSteps": [1],
            "lastSavedAt": "2025-01-01T08:00:00+00:00",
            "schemaVersion": 2,
        }
    )

    snapshot = deserialize_snapshot(raw)

    assert snapshot is not None
    assert snapshot.form_data.title == "Hallo Welt"


def test_burst_of_changes_writes_once_with_final_state(clock, wall_clock) -> None:
    storage = MemoryDraftStorage()
    current = {"title": ""}
    persistence = DraftPersistence(
        storage,
        key="k",
        capture=lambda: _state(title=current["title"]),
        clock=clock,
        now=wall_clock,
    )
    writes: list[SaveStatus] = []
    persistence.add_listener(writes.append)

    for index in range(10):
        current["title"] = f"Titel {index}"
        persistence.schedule()
        clock.advance(0.03)
        persistence.poll()

    assert "k" not in storage.data
    clock.advance(0.5)
    assert persistence.poll()

    assert writes == [SaveStatus.SAVING, SaveStatus.SAVED]
    assert json.loads(storage.data["k"])["formData"]["title"] == "Titel 9"
    assert persistence.has_draft
    assert persistence.last_saved_at == wall_clock.value


def test_is_saving_is_true_during_the_write(clock, wall_clock) -> None:
    observed: list[bool] = []

    class ObservingStorage(MemoryDraftStorage):
        def write(self, key: str, value: str) -> None:
            observed.append(persistence.is_saving)
            super().write(key, value)

    persistence = DraftPersistence(
        ObservingStorage(), key="k", capture=lambda: _state(), clock=clock, now=wall_clock
    )
    persistence.schedule()
    persistence.flush()

    assert observed == [True]
    assert not persistence.is_saving


def test_storage_failures_are_swallowed(clock, wall_clock, caplog) -> None:
    storage = FailingStorage()
    persistence = DraftPersistence(storage, key="k", capture=lambda: _state(), clock=clock, now=wall_clock)
    statuses: list[SaveStatus] = []
    persistence.add_listener(statuses.append)

    assert persistence.load() is None
    persistence.schedule()
    with caplog.at_level("WARNING"):
        persistence.flush()
        persistence.clear()

    assert storage.writes == 1
    assert statuses == [SaveStatus.SAVING, SaveStatus.FAILED, SaveStatus.CLEARED]
    assert not persistence.has_draft
    assert not persistence.is_saving
    assert "Failed to save draft" in caplog.text


def test_unserializable_values_are_swallowed(clock, wall_clock) -> None:
    form = ListingFormData()
    form.title = object()  # type: ignore[assignment]
    storage = MemoryDraftStorage()
    persistence = DraftPersistence(
        storage,
        key="k",
        capture=lambda: DraftState(form_data=form, current_step=1),
        clock=clock,
        now=wall_clock,
    )

    persistence.schedule()
    persistence.flush()

    assert storage.data == {}
    assert not persistence.has_draft


def test_load_reads_once_and_exposes_saved_at(clock, wall_clock) -> None:
    reads: list[str] = []

    class CountingStorage(MemoryDraftStorage):
        def read(self, key: str) -> str | None:
            reads.append(key)
            return super().read(key)

    snapshot = build_snapshot(ListingFormData(title="Hallo"), current_step=1, visited_steps=[1], saved_at=SAVED_AT)
    storage = CountingStorage({"k": serialize_snapshot(snapshot)})
    persistence = DraftPersistence(storage, key="k", capture=lambda: _state(), clock=clock, now=wall_clock)

    restored = persistence.load()

    assert reads == ["k"]
    assert restored is not None
    assert persistence.has_draft
    assert persistence.last_saved_at == SAVED_AT


def test_cancel_prevents_stray_write(clock, wall_clock) -> None:
    storage = MemoryDraftStorage()
    persistence = DraftPersistence(storage, key="k", capture=lambda: _state(), clock=clock, now=wall_clock)

    persistence.schedule()
    persistence.cancel()
    clock.advance(5)

    assert not persistence.poll()
    assert storage.data == {}


def test_key_is_required(clock) -> None:
    with pytest.raises(ValueError):
        DraftPersistence(MemoryDraftStorage(), key="", capture=lambda: _state(), clock=clock)
