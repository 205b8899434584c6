"""Custom exception types for the upload wizard."""

from __future__ import annotations


class WizardError(Exception):
    """Base exception for upload wizard issues."""


class WizardNotInitializedError(WizardError):
    """Raised when the wizard is requested from a session that never created it."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or "The upload wizard is not initialised; call ensure_upload_wizard() first."
        )


class WizardClosedError(WizardError):
    """Raised when an operation is invoked on a closed wizard."""


class InvalidStepError(WizardError, ValueError):
    """Raised for step numbers outside the wizard's fixed range."""

    def __init__(self, step: object) -> None:
        super().__init__(f"Unknown wizard step: {step!r} (expected 1-4)")
        self.step = step


class UnknownFieldError(WizardError, KeyError):
    """Raised for field identifiers the wizard does not know."""

    def __init__(self, field: object) -> None:
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"Unknown wizard field: {self.field!r}"


class DerivedFieldError(WizardError):
    """Raised when a caller writes a field that is projected from file handles."""


class DraftStorageError(WizardError):
    """Raised by storage backends; never escapes the persistence layer."""
