"""Step sequencing for the upload wizard."""

from __future__ import annotations

from wizard.navigation.keys import WizardSessionKeys
from wizard.navigation.router import NavigationController, NavigationState

__all__ = [
    "NavigationController",
    "NavigationState",
    "WizardSessionKeys",
]
