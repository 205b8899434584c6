"""Pydantic models for the listing upload draft.

``ListingFormData`` mirrors the JSON contract of the persisted draft: attributes
are snake_case in Python and camelCase on the wire (``resourceType``,
``lehrmittelIds`` ...). Field values are deliberately loose strings so that any
user input can be held in the draft; strictness lives in
:mod:`wizard.validation`.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any, Final

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

STEPS: Final[tuple[int, ...]] = (1, 2, 3, 4)
FIRST_STEP: Final[int] = 1
LAST_STEP: Final[int] = 4
MAX_COMPETENCIES: Final[int] = 5


class Language(StrEnum):
    DE = "de"
    EN = "en"
    FR = "fr"
    IT = "it"


class Dialect(StrEnum):
    STANDARD = "STANDARD"
    SWISS = "SWISS"
    BOTH = "BOTH"


class ResourceType(StrEnum):
    PDF = "pdf"
    WORD = "word"
    POWERPOINT = "powerpoint"
    EXCEL = "excel"
    ONENOTE = "onenote"
    OTHER = "other"


class Cycle(StrEnum):
    CYCLE_1 = "1"
    CYCLE_2 = "2"
    CYCLE_3 = "3"


class PriceType(StrEnum):
    FREE = "free"
    PAID = "paid"


class LicenseScope(StrEnum):
    INDIVIDUAL = "individual"
    SCHOOL = "school"
    BOTH = "both"


LEGAL_CONFIRMATION_FIELDS: Final[tuple[str, ...]] = (
    "legalOwnContent",
    "legalNoTextbookScans",
    "legalNoTrademarks",
    "legalSwissGerman",
    "legalTermsAccepted",
)

# Display-only mirrors of the attached file handles.
DERIVED_FILE_FIELDS: Final[tuple[str, ...]] = ("fileNames", "previewFileNames")


class ListingFormData(BaseModel):
    """Mutable draft payload collected across the four wizard steps."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    # Step 1: basics
    title: str = ""
    description: str = ""
    language: str = Language.DE.value
    dialect: str = Dialect.BOTH.value
    resource_type: str = ResourceType.PDF.value

    # Step 2: classification
    cycle: str = ""
    subject: str = ""
    subject_code: str = ""
    canton: str = ""
    competencies: list[str] = Field(default_factory=list)
    lehrmittel_ids: list[str] = Field(default_factory=list)

    # Step 3: commercial terms
    price_type: str = PriceType.PAID.value
    price: str = ""
    editable: bool = False
    license_scope: str = LicenseScope.INDIVIDUAL.value

    # Step 4: artifacts & legal
    file_names: list[str] = Field(default_factory=list)
    preview_file_names: list[str] = Field(default_factory=list)
    legal_own_content: bool = False
    legal_no_textbook_scans: bool = False
    legal_no_trademarks: bool = False
    legal_swiss_german: bool = False
    legal_terms_accepted: bool = False

    @classmethod
    def field_aliases(cls) -> dict[str, str]:
        """Map camelCase and snake_case identifiers to attribute names."""

        mapping: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            mapping[name] = name
            if info.alias:
                mapping[info.alias] = name
        return mapping

    @classmethod
    def resolve_field(cls, key: str) -> str | None:
        return _FIELD_ALIASES.get(key)

    @classmethod
    def coerce_value(cls, attribute: str, value: Any) -> Any:
        """Return ``value`` in the form the field stores, or unchanged if it does not fit.

        Numbers become strings (``st.number_input`` yields floats for ``price``).
        Boolean fields are left alone so only a literal ``True`` confirms.
        """

        adapter = _FIELD_ADAPTERS.get(attribute)
        if adapter is None:
            return value
        try:
            return adapter.validate_python(value)
        except ValidationError:
            return value

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON-ready camelCase representation."""

        return self.model_dump(mode="json", by_alias=True)

    def legal_flags(self) -> dict[str, bool]:
        """Return each legal confirmation; only a literal ``True`` counts."""

        return {field: getattr(self, _FIELD_ALIASES[field]) is True for field in LEGAL_CONFIRMATION_FIELDS}


_FIELD_ALIASES: Final[dict[str, str]] = ListingFormData.field_aliases()
_FIELD_ADAPTERS: Final[dict[str, TypeAdapter[Any]]] = {
    name: TypeAdapter(info.annotation, config=ConfigDict(coerce_numbers_to_str=True))
    for name, info in ListingFormData.model_fields.items()
    if info.annotation is not bool
}


def default_form_data() -> ListingFormData:
    return ListingFormData()


def normalize_visited_steps(steps: object, current_step: int = FIRST_STEP) -> list[int]:
    """Return ordered, de-duplicated visited steps that include 1 and ``current_step``."""

    ordered: list[int] = [FIRST_STEP]
    if isinstance(steps, (list, tuple)):
        for entry in steps:
            if isinstance(entry, bool) or not isinstance(entry, int):
                continue
            if entry in STEPS and entry not in ordered:
                ordered.append(entry)
    if current_step in STEPS and current_step not in ordered:
        ordered.append(current_step)
    return ordered


class DraftSnapshot(BaseModel):
    """Unit of persistence: form data plus navigation state and save time."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    form_data: ListingFormData = Field(default_factory=ListingFormData)
    current_step: int = Field(default=FIRST_STEP, ge=FIRST_STEP, le=LAST_STEP)
    visited_steps: list[int] = Field(default_factory=lambda: [FIRST_STEP])
    last_saved_at: datetime

    @field_validator("current_step", mode="before")
    @classmethod
    def _reject_bool_step(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("current step must be an integer")
        return value

    @model_validator(mode="after")
    def _ensure_visited_contains_current(self) -> "DraftSnapshot":
        self.visited_steps = normalize_visited_steps(self.visited_steps, self.current_step)
        return self

    @field_serializer("last_saved_at")
    def _serialize_saved_at(self, value: datetime) -> str:
        return value.isoformat()

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "Cycle",
    "DERIVED_FILE_FIELDS",
    "Dialect",
    "DraftSnapshot",
    "FIRST_STEP",
    "LAST_STEP",
    "LEGAL_CONFIRMATION_FIELDS",
    "Language",
    "LicenseScope",
    "ListingFormData",
    "MAX_COMPETENCIES",
    "PriceType",
    "ResourceType",
    "STEPS",
    "default_form_data",
    "normalize_visited_steps",
]
