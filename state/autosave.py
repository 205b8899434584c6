"""Draft autosave for the upload wizard.

Every qualifying change calls :meth:`DraftPersistence.schedule`; the write
happens once the quiet period has passed without further changes, so a burst
of edits produces exactly one snapshot holding the final state. Persistence is
best effort: storage or serialization failures are logged and the wizard keeps
working without a durable draft.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from config import DEFAULT_DEBOUNCE_SECONDS
from core.errors import DraftStorageError
from models.listing import DraftSnapshot, ListingFormData
from state.debounce import Clock, Debouncer
from state.storage import DraftStorage
from utils.logging_context import set_draft_key

logger = logging.getLogger(__name__)

WallClock = Callable[[], datetime]

_FORM_DATA_KEYS: tuple[str, ...] = ("formData", "form_data")

_SAVE_ERRORS: tuple[type[Exception], ...] = (
    DraftStorageError,
    PydanticSerializationError,
    TypeError,
    ValueError,
    OSError,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DraftState:
    """The live values a snapshot is captured from."""

    form_data: ListingFormData
    current_step: int
    visited_steps: tuple[int, ...] = field(default=(1,))


class SaveStatus(StrEnum):
    SAVING = "saving"
    SAVED = "saved"
    FAILED = "failed"
    CLEARED = "cleared"


def build_snapshot(
    form_data: ListingFormData,
    *,
    current_step: int,
    visited_steps: Iterable[int],
    saved_at: datetime | None = None,
) -> DraftSnapshot:
    """Return a snapshot of the wizard state stamped with ``saved_at``."""

    return DraftSnapshot(
        form_data=form_data,
        current_step=current_step,
        visited_steps=list(visited_steps),
        last_saved_at=saved_at or utc_now(),
    )


def _invalid_form_fields(exc: ValidationError) -> set[str]:
    fields: set[str] = set()
    for error in exc.errors():
        loc = error["loc"]
        if len(loc) >= 2 and loc[0] in _FORM_DATA_KEYS and isinstance(loc[1], str):
            fields.add(loc[1])
    return fields


def parse_snapshot(payload: Mapping[str, Any]) -> DraftSnapshot:
    """Validate a decoded snapshot payload; unknown keys are ignored.

    Form fields holding values of the wrong shape are dropped back to their
    defaults so one bad value does not cost the rest of the draft.

    Raises:
        pydantic.ValidationError: When required parts are missing or malformed.
    """

    try:
        return DraftSnapshot.model_validate(payload)
    except ValidationError as exc:
        invalid = _invalid_form_fields(exc)
        form_key = next((key for key in _FORM_DATA_KEYS if isinstance(payload.get(key), Mapping)), None)
        if not invalid or form_key is None:
            raise
    logger.warning("Dropping invalid draft fields: %s", ", ".join(sorted(invalid)))
    form_data = {key: value for key, value in payload[form_key].items() if key not in invalid}
    return DraftSnapshot.model_validate({**payload, form_key: form_data})


def serialize_snapshot(snapshot: DraftSnapshot) -> str:
    """Return the JSON text stored under the draft key."""

    return json.dumps(snapshot.to_payload(), ensure_ascii=False)


def deserialize_snapshot(raw: str | None) -> DraftSnapshot | None:
    """Decode stored JSON text; corrupt or foreign data yields ``None``."""

    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring draft that is not valid JSON")
        return None
    if not isinstance(payload, Mapping):
        logger.warning("Ignoring draft with unexpected payload type %s", type(payload).__name__)
        return None
    try:
        return parse_snapshot(payload)
    except ValidationError as exc:
        logger.warning("Ignoring draft that failed validation: %s", exc.error_count())
        return None


SaveListener = Callable[[SaveStatus], None]


class DraftPersistence:
    """Debounced snapshot writes into one storage slot.

    Args:
        storage: Backend holding the serialized draft.
        key: Storage slot; injected so tests and parallel wizards stay isolated.
        capture: Returns the live state at write time.
        delay: Quiet period in seconds.
        clock: Monotonic clock driving the debounce deadline.
        now: Wall clock used for ``lastSavedAt``.
    """

    def __init__(
        self,
        storage: DraftStorage,
        *,
        key: str,
        capture: Callable[[], DraftState],
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        clock: Clock = time.monotonic,
        now: WallClock = utc_now,
    ) -> None:
        if not key:
            raise ValueError("A draft storage key is required")
        self._storage = storage
        self._key = key
        self._capture = capture
        self._now = now
        self._debouncer = Debouncer(delay, self._write, clock=clock)
        self._has_draft = False
        self._is_saving = False
        self._last_saved_at: datetime | None = None
        self._listeners: list[SaveListener] = []
        set_draft_key(key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def has_draft(self) -> bool:
        return self._has_draft

    @property
    def is_saving(self) -> bool:
        return self._is_saving

    @property
    def last_saved_at(self) -> datetime | None:
        return self._last_saved_at

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def add_listener(self, listener: SaveListener) -> None:
        self._listeners.append(listener)

    def _notify(self, status: SaveStatus) -> None:
        for listener in list(self._listeners):
            listener(status)

    def load(self) -> DraftSnapshot | None:
        """Read the slot once and remember whether a usable draft exists."""

        try:
            raw = self._storage.read(self._key)
        except (DraftStorageError, OSError) as exc:
            logger.warning("Draft storage unavailable; starting without a draft", exc_info=exc)
            return None
        snapshot = deserialize_snapshot(raw)
        if snapshot is None:
            return None
        self._has_draft = True
        self._last_saved_at = snapshot.last_saved_at
        logger.info("Restored draft saved at %s", snapshot.last_saved_at.isoformat())
        return snapshot

    def mark_restored(self, saved_at: datetime) -> None:
        """Adopt a snapshot that came from elsewhere (e.g. the server mirror)."""

        self._has_draft = True
        self._last_saved_at = saved_at

    def schedule(self) -> None:
        """Mark the state dirty and restart the quiet period."""

        self._debouncer.trigger()

    def poll(self) -> bool:
        """Write the draft when the quiet period has elapsed."""

        return self._debouncer.poll()

    def flush(self) -> bool:
        """Write a pending draft immediately."""

        return self._debouncer.flush()

    def cancel(self) -> bool:
        return self._debouncer.cancel()

    def _write(self) -> None:
        self._is_saving = True
        self._notify(SaveStatus.SAVING)
        saved_at: datetime | None = None
        try:
            state = self._capture()
            saved_at = self._now()
            snapshot = build_snapshot(
                state.form_data,
                current_step=state.current_step,
                visited_steps=state.visited_steps,
                saved_at=saved_at,
            )
            self._storage.write(self._key, serialize_snapshot(snapshot))
        except _SAVE_ERRORS as exc:
            saved_at = None
            logger.warning("Failed to save draft", exc_info=exc)
        finally:
            self._is_saving = False
        if saved_at is None:
            self._notify(SaveStatus.FAILED)
            return
        self._last_saved_at = saved_at
        self._has_draft = True
        self._notify(SaveStatus.SAVED)

    def clear(self) -> None:
        """Drop the pending write and the stored draft."""

        self._debouncer.cancel()
        try:
            self._storage.remove(self._key)
        except (DraftStorageError, OSError) as exc:
            logger.warning("Failed to remove stored draft", exc_info=exc)
        self._has_draft = False
        self._last_saved_at = None
        self._is_saving = False
        self._notify(SaveStatus.CLEARED)


__all__ = [
    "DraftPersistence",
    "DraftState",
    "SaveListener",
    "SaveStatus",
    "build_snapshot",
    "deserialize_snapshot",
    "parse_snapshot",
    "serialize_snapshot",
    "utc_now",
]
