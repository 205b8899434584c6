"""Core building blocks shared by the upload wizard: errors and pricing."""

from .errors import (
    DerivedFieldError,
    DraftStorageError,
    InvalidStepError,
    UnknownFieldError,
    WizardClosedError,
    WizardError,
    WizardNotInitializedError,
)

__all__ = [
    "DerivedFieldError",
    "DraftStorageError",
    "InvalidStepError",
    "UnknownFieldError",
    "WizardClosedError",
    "WizardError",
    "WizardNotInitializedError",
]
