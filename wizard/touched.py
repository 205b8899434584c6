"""Touched-field bookkeeping used to gate when validation errors are shown.

Touch state never feeds into validation; it only decides whether an error that
:mod:`wizard.validation` already produced is displayed.
"""

from __future__ import annotations

from typing import Final, Iterable, Mapping

from core.errors import UnknownFieldError
from models.listing import LEGAL_CONFIRMATION_FIELDS
from wizard.validation import FieldError, ensure_step

STEP_TOUCH_FIELDS: Final[Mapping[int, tuple[str, ...]]] = {
    1: ("title", "description", "language", "dialect", "resourceType"),
    2: ("cycle", "subject", "canton", "competencies", "lehrmittelIds"),
    3: ("priceType", "price", "editable"),
    4: ("files", "previewFiles", *LEGAL_CONFIRMATION_FIELDS),
}

TOUCHABLE_FIELDS: Final[tuple[str, ...]] = tuple(
    field for step in sorted(STEP_TOUCH_FIELDS) for field in STEP_TOUCH_FIELDS[step]
)
_TOUCHABLE_LOOKUP: Final[frozenset[str]] = frozenset(TOUCHABLE_FIELDS)


class TouchTracker:
    """Record which fields the user interacted with.

    Flags only ever flip from ``False`` to ``True``; :meth:`reset` is reserved
    for a full draft clear.
    """

    def __init__(self) -> None:
        self._touched: dict[str, bool] = dict.fromkeys(TOUCHABLE_FIELDS, False)

    @staticmethod
    def _ensure_field(field: str) -> str:
        if field not in _TOUCHABLE_LOOKUP:
            raise UnknownFieldError(field)
        return field

    def mark_touched(self, field: str) -> None:
        self._touched[self._ensure_field(field)] = True

    def mark_step_touched(self, step: int) -> None:
        fields = STEP_TOUCH_FIELDS[ensure_step(step)]
        updated = dict(self._touched)
        for field in fields:
            updated[field] = True
        self._touched = updated

    def is_touched(self, field: str) -> bool:
        return self._touched[self._ensure_field(field)]

    def touched_fields(self) -> dict[str, bool]:
        return dict(self._touched)

    def reset(self) -> None:
        self._touched = dict.fromkeys(TOUCHABLE_FIELDS, False)

    def visible_errors(self, errors: Iterable[FieldError]) -> list[FieldError]:
        """Filter ``errors`` down to the ones whose field has been touched."""

        return [error for error in errors if self._touched.get(error.field, False)]


__all__ = ["STEP_TOUCH_FIELDS", "TOUCHABLE_FIELDS", "TouchTracker"]
