"""Per-step validation rules for the listing upload wizard.

Every function here is pure: it reads the form data (and the count of attached
primary files, which never lives in the form data) and returns data. Nothing
is raised for invalid input and nothing is mutated, so callers may validate at
any time, independent of which fields the user has touched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence

from core.errors import InvalidStepError
from core.pricing import MAX_PRICE_CENTS, MIN_PRICE_CENTS, is_price_step_multiple, parse_price, price_to_cents
from models.listing import MAX_COMPETENCIES, STEPS, ListingFormData, PriceType
from utils.i18n import LocalizedText, resolve_text

TITLE_MIN_LENGTH: Final[int] = 5
TITLE_MAX_LENGTH: Final[int] = 64
DESCRIPTION_MIN_LENGTH: Final[int] = 20
DESCRIPTION_MAX_LENGTH: Final[int] = 2000

_TITLE_REQUIRED: Final[LocalizedText] = ("Titel ist erforderlich", "Title is required")
_TITLE_TOO_SHORT: Final[LocalizedText] = (
    "Titel muss mindestens {min} Zeichen haben",
    "Title must be at least {min} characters",
)
_TITLE_TOO_LONG: Final[LocalizedText] = (
    "Titel darf maximal {max} Zeichen haben",
    "Title must be at most {max} characters",
)
_DESCRIPTION_REQUIRED: Final[LocalizedText] = ("Beschreibung ist erforderlich", "Description is required")
_DESCRIPTION_TOO_SHORT: Final[LocalizedText] = (
    "Beschreibung muss mindestens {min} Zeichen haben",
    "Description must be at least {min} characters",
)
_DESCRIPTION_TOO_LONG: Final[LocalizedText] = (
    "Beschreibung darf maximal {max} Zeichen haben",
    "Description must be at most {max} characters",
)
_CYCLE_REQUIRED: Final[LocalizedText] = ("Zyklus ist erforderlich", "Cycle is required")
_SUBJECT_REQUIRED: Final[LocalizedText] = ("Fach ist erforderlich", "Subject is required")
_COMPETENCIES_TOO_MANY: Final[LocalizedText] = (
    "Maximal {max} Kompetenzen auswählbar",
    "Select at most {max} competencies",
)
_PRICE_REQUIRED: Final[LocalizedText] = ("Preis ist erforderlich", "Price is required")
_PRICE_NOT_A_NUMBER: Final[LocalizedText] = (
    "Preis muss eine positive Zahl sein",
    "Price must be a positive number",
)
_PRICE_TOO_HIGH: Final[LocalizedText] = ("Preis darf maximal CHF 50 sein", "Price must not exceed CHF 50")
_PRICE_TOO_LOW: Final[LocalizedText] = ("Mindestpreis ist CHF 0.50", "Minimum price is CHF 0.50")
_PRICE_NOT_A_STEP: Final[LocalizedText] = (
    "Preis muss in Schritten von CHF 0.50 angegeben werden",
    "Price must be a multiple of CHF 0.50",
)
_FILES_REQUIRED: Final[LocalizedText] = (
    "Mindestens eine Datei ist erforderlich",
    "At least one file is required",
)
_LEGAL_MESSAGES: Final[dict[str, LocalizedText]] = {
    "legalOwnContent": (
        "Bitte bestätigen Sie, dass Sie eigene Inhalte verwenden",
        "Please confirm that the content is your own",
    ),
    "legalNoTextbookScans": (
        "Bitte bestätigen Sie, dass keine Lehrmittel-Scans enthalten sind",
        "Please confirm that no textbook scans are included",
    ),
    "legalNoTrademarks": (
        "Bitte bestätigen Sie, dass keine geschützten Marken enthalten sind",
        "Please confirm that no protected trademarks are included",
    ),
    "legalSwissGerman": (
        "Bitte bestätigen Sie die Schweizer Rechtschreibung",
        "Please confirm Swiss spelling",
    ),
    "legalTermsAccepted": (
        "Bitte akzeptieren Sie die Verkäufervereinbarung",
        "Please accept the seller agreement",
    ),
}


@dataclass(frozen=True)
class FieldError:
    """A field-scoped validation problem."""

    field: str
    message: str
    code: str = "invalid"


def ensure_step(step: object) -> int:
    """Return ``step`` when it is one of the wizard steps, otherwise raise."""

    if isinstance(step, bool) or not isinstance(step, int) or step not in STEPS:
        raise InvalidStepError(step)
    return step


def _as_text(value: object) -> str:
    # non-string input can reach the draft through update_field
    return value if isinstance(value, str) else ""


def _as_list(value: object) -> list[object]:
    return list(value) if isinstance(value, (list, tuple, set, frozenset)) else []


def _length_error(
    field: str,
    value: str,
    *,
    minimum: int,
    maximum: int,
    messages: tuple[LocalizedText, LocalizedText, LocalizedText],
    lang: str,
) -> FieldError | None:
    required, too_short, too_long = messages
    cleaned = value.strip()
    if not cleaned:
        return FieldError(field, resolve_text(required, lang), "required")
    if len(cleaned) < minimum:
        return FieldError(field, resolve_text(too_short, lang, min=minimum), "too_short")
    if len(cleaned) > maximum:
        return FieldError(field, resolve_text(too_long, lang, max=maximum), "too_long")
    return None


def _basics_errors(form: ListingFormData, lang: str) -> list[FieldError]:
    errors: list[FieldError] = []
    title_error = _length_error(
        "title",
        _as_text(form.title),
        minimum=TITLE_MIN_LENGTH,
        maximum=TITLE_MAX_LENGTH,
        messages=(_TITLE_REQUIRED, _TITLE_TOO_SHORT, _TITLE_TOO_LONG),
        lang=lang,
    )
    if title_error:
        errors.append(title_error)
    description_error = _length_error(
        "description",
        _as_text(form.description),
        minimum=DESCRIPTION_MIN_LENGTH,
        maximum=DESCRIPTION_MAX_LENGTH,
        messages=(_DESCRIPTION_REQUIRED, _DESCRIPTION_TOO_SHORT, _DESCRIPTION_TOO_LONG),
        lang=lang,
    )
    if description_error:
        errors.append(description_error)
    return errors


def _classification_errors(form: ListingFormData, lang: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if not _as_text(form.cycle).strip():
        errors.append(FieldError("cycle", resolve_text(_CYCLE_REQUIRED, lang), "required"))
    if not _as_text(form.subject).strip():
        errors.append(FieldError("subject", resolve_text(_SUBJECT_REQUIRED, lang), "required"))
    # the picker stops at five, but restored or programmatic drafts may not
    if len(_as_list(form.competencies)) > MAX_COMPETENCIES:
        errors.append(
            FieldError(
                "competencies",
                resolve_text(_COMPETENCIES_TOO_MANY, lang, max=MAX_COMPETENCIES),
                "too_many",
            )
        )
    return errors


def price_error(raw_price: str, lang: str = "de") -> FieldError | None:
    """Validate a paid listing price given as a decimal string."""

    if not _as_text(raw_price).strip():
        return FieldError("price", resolve_text(_PRICE_REQUIRED, lang), "required")
    value = parse_price(raw_price)
    if value is None or value < 0:
        return FieldError("price", resolve_text(_PRICE_NOT_A_NUMBER, lang), "not_a_number")
    cents = price_to_cents(value)
    if cents > MAX_PRICE_CENTS:
        return FieldError("price", resolve_text(_PRICE_TOO_HIGH, lang), "too_high")
    if 0 < cents < MIN_PRICE_CENTS:
        return FieldError("price", resolve_text(_PRICE_TOO_LOW, lang), "too_low")
    if not is_price_step_multiple(value):
        return FieldError("price", resolve_text(_PRICE_NOT_A_STEP, lang), "not_a_step")
    return None


def _commercial_errors(form: ListingFormData, lang: str) -> list[FieldError]:
    if form.price_type != PriceType.PAID:
        return []
    error = price_error(_as_text(form.price), lang)
    return [error] if error else []


def _artifact_errors(form: ListingFormData, file_count: int, lang: str) -> list[FieldError]:
    errors: list[FieldError] = []
    if file_count <= 0:
        errors.append(FieldError("files", resolve_text(_FILES_REQUIRED, lang), "required"))
    for field, confirmed in form.legal_flags().items():
        if not confirmed:
            errors.append(FieldError(field, resolve_text(_LEGAL_MESSAGES[field], lang), "unconfirmed"))
    return errors


def errors_for_step(
    form: ListingFormData,
    step: int,
    *,
    files: Sequence[object] = (),
    lang: str = "de",
) -> list[FieldError]:
    """Return the validation errors for ``step``.

    Args:
        form: Current form data. Never mutated.
        step: Wizard step (1-4).
        files: Attached primary file handles; only their count matters.
        lang: Language used for the error messages.

    Returns:
        Errors in field order; at most one per field.
    """

    ensure_step(step)
    if step == 1:
        return _basics_errors(form, lang)
    if step == 2:
        return _classification_errors(form, lang)
    if step == 3:
        return _commercial_errors(form, lang)
    return _artifact_errors(form, len(files), lang)


def is_step_valid(form: ListingFormData, step: int, *, files: Sequence[object] = ()) -> bool:
    return not errors_for_step(form, step, files=files)


def is_step_complete(form: ListingFormData, step: int, *, files: Sequence[object] = ()) -> bool:
    """Return ``True`` when ``step`` has enough input to look finished.

    This is looser than :func:`is_step_valid`: a three-character title makes
    step 1 complete but not valid.
    """

    ensure_step(step)
    if step == 1:
        return bool(_as_text(form.title).strip()) and bool(_as_text(form.description).strip())
    if step == 2:
        return form.cycle != "" and form.subject != ""
    if step == 3:
        return form.price_type == PriceType.FREE or (form.price_type == PriceType.PAID and form.price != "")
    return len(files) > 0 and all(form.legal_flags().values())


def validate_all(
    form: ListingFormData,
    *,
    files: Sequence[object] = (),
    lang: str = "de",
) -> dict[int, list[FieldError]]:
    """Return errors for every step regardless of touch state (submit-time pass)."""

    return {step: errors_for_step(form, step, files=files, lang=lang) for step in STEPS}


__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "DESCRIPTION_MIN_LENGTH",
    "FieldError",
    "TITLE_MAX_LENGTH",
    "TITLE_MIN_LENGTH",
    "ensure_step",
    "errors_for_step",
    "is_step_complete",
    "is_step_valid",
    "price_error",
    "validate_all",
]
