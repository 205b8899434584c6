from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WizardSessionKeys:
    """Namespaced session-state keys for one upload wizard instance."""

    wizard_id: str

    @property
    def prefix(self) -> str:
        return f"wiz:{self.wizard_id}:"

    def namespace(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @property
    def instance(self) -> str:
        return self.namespace("instance")

    @property
    def draft_store(self) -> str:
        return self.namespace("draft_store")

    @property
    def restored_ack(self) -> str:
        return self.namespace("restored_ack")
