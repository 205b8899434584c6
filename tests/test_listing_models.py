import pytest
from pydantic import ValidationError

from models.listing import DraftSnapshot, ListingFormData, normalize_visited_steps


def test_field_aliases_cover_camel_and_snake_case() -> None:
    assert ListingFormData.resolve_field("lehrmittelIds") == "lehrmittel_ids"
    assert ListingFormData.resolve_field("lehrmittel_ids") == "lehrmittel_ids"
    assert ListingFormData.resolve_field("legalTermsAccepted") == "legal_terms_accepted"
    assert ListingFormData.resolve_field("unknown") is None


def test_payload_uses_camel_case() -> None:
    payload = ListingFormData(resource_type="word").to_payload()

    assert payload["resourceType"] == "word"
    assert "resource_type" not in payload
    assert payload["priceType"] == "paid"
    assert payload["licenseScope"] == "individual"


def test_legal_flags_report_each_confirmation() -> None:
    flags = ListingFormData(legal_own_content=True).legal_flags()

    assert flags["legalOwnContent"] is True
    assert sum(flags.values()) == 1


@pytest.mark.parametrize(
    ("steps", "current", "expected"),
    [
        ([], 1, [1]),
        ([3, 2, 3], 3, [1, 3, 2]),
        ([1, True, "2", 9, 2], 2, [1, 2]),
        ("1,2", 2, [1, 2]),
    ],
)
def test_normalize_visited_steps(steps, current, expected) -> None:
    assert normalize_visited_steps(steps, current) == expected


def test_snapshot_rejects_boolean_step() -> None:
    with pytest.raises(ValidationError):
        DraftSnapshot.model_validate(
            {"formData": {}, "currentStep": True, "visitedSteps": [1], "lastSavedAt": "2025-01-01T00:00:00Z"}
        )


def test_numbers_validate_as_text() -> None:
    form = ListingFormData.model_validate({"price": 1.5, "competencies": [3]})

    assert form.price == "1.5"
    assert form.competencies == ["3"]


@pytest.mark.parametrize(
    ("attribute", "value", "expected"),
    [
        ("price", 12, "12"),
        ("title", {"de": "x"}, {"de": "x"}),
        ("legal_terms_accepted", "true", "true"),
        ("competencies", ["MA.1"], ["MA.1"]),
    ],
)
def test_coerce_value(attribute, value, expected) -> None:
    assert ListingFormData.coerce_value(attribute, value) == expected
