"""Helpers for binding the upload wizard to Streamlit session state."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any

import streamlit as st

from config import WizardSettings, load_wizard_settings
from constants.keys import StateKeys
from core.errors import WizardNotInitializedError
from state.storage import DraftStorage, build_storage
from utils.i18n import DRAFT_RESTORED, DRAFT_RESTORED_MESSAGE, resolve_text
from utils.logging_context import configure_logging
from wizard.navigation import WizardSessionKeys
from wizard.upload_wizard import UploadWizard

logger = logging.getLogger(__name__)


def _session(session_state: MutableMapping[str, Any] | None) -> MutableMapping[str, Any]:
    return session_state if session_state is not None else st.session_state


def ensure_upload_wizard(
    settings: WizardSettings | None = None,
    *,
    wizard_id: str = StateKeys.DEFAULT_WIZARD_ID,
    session_state: MutableMapping[str, Any] | None = None,
    storage: DraftStorage | None = None,
    autosave_ticker: bool = True,
    **wizard_kwargs: Any,
) -> UploadWizard:
    """Return the session's wizard, creating (and restoring) it on first use.

    Call this at the top of every rerun: it runs due debounced writes and, unless
    ``autosave_ticker`` is off, renders the timer fragment that keeps writing
    them between interactions.
    """

    state = _session(session_state)
    keys = WizardSessionKeys(wizard_id)
    wizard = state.get(keys.instance)
    if not isinstance(wizard, UploadWizard) or wizard.closed:
        configure_logging()
        resolved = settings or load_wizard_settings()
        if storage is None:
            storage = build_storage(resolved, session_state=state, namespace=keys.draft_store)
        wizard_kwargs.setdefault("lang", state.get(StateKeys.LANG) or resolved.default_lang)
        wizard = UploadWizard(settings=resolved, storage=storage, **wizard_kwargs)
        state[keys.instance] = wizard
        state.setdefault(StateKeys.LANG, wizard.lang)
        logger.debug("Created upload wizard %s (restored=%s)", wizard_id, wizard.restored)
    wizard.tick()
    if autosave_ticker:
        run_autosave_ticker(wizard_id=wizard_id, session_state=state)
    return wizard


def use_upload_wizard(
    *,
    wizard_id: str = StateKeys.DEFAULT_WIZARD_ID,
    session_state: MutableMapping[str, Any] | None = None,
) -> UploadWizard:
    """Return the existing wizard or raise when the page never created one."""

    wizard = _session(session_state).get(WizardSessionKeys(wizard_id).instance)
    if not isinstance(wizard, UploadWizard):
        raise WizardNotInitializedError()
    return wizard


def _tick_session_wizard(state: MutableMapping[str, Any], wizard_id: str) -> None:
    wizard = state.get(WizardSessionKeys(wizard_id).instance)
    if isinstance(wizard, UploadWizard) and not wizard.closed:
        wizard.tick()


def run_autosave_ticker(
    *,
    wizard_id: str = StateKeys.DEFAULT_WIZARD_ID,
    session_state: MutableMapping[str, Any] | None = None,
    interval: float | None = None,
) -> None:
    """Render an invisible fragment that reruns on a timer and writes due drafts.

    Debounced writes otherwise only run on the next user interaction.
    """

    state = _session(session_state)
    if interval is None:
        wizard = use_upload_wizard(wizard_id=wizard_id, session_state=state)
        interval = wizard.settings.draft_debounce_seconds
    ticker = st.fragment(run_every=interval)(_tick_session_wizard)
    ticker(state, wizard_id)


def consume_restored_notice(
    *,
    wizard_id: str = StateKeys.DEFAULT_WIZARD_ID,
    session_state: MutableMapping[str, Any] | None = None,
    lang: str | None = None,
) -> tuple[str, str] | None:
    """Return the "draft restored" title and message once per restored session."""

    state = _session(session_state)
    keys = WizardSessionKeys(wizard_id)
    wizard = use_upload_wizard(wizard_id=wizard_id, session_state=state)
    if not wizard.restored or state.get(keys.restored_ack):
        return None
    state[keys.restored_ack] = True
    lang = lang or wizard.lang
    return resolve_text(DRAFT_RESTORED, lang), resolve_text(DRAFT_RESTORED_MESSAGE, lang)


def reset_upload_wizard(
    *,
    wizard_id: str = StateKeys.DEFAULT_WIZARD_ID,
    session_state: MutableMapping[str, Any] | None = None,
) -> None:
    """Close the session's wizard and drop its session keys; the stored draft stays."""

    state = _session(session_state)
    keys = WizardSessionKeys(wizard_id)
    wizard = state.get(keys.instance)
    if isinstance(wizard, UploadWizard):
        wizard.close()
    for key in [key for key in list(state.keys()) if isinstance(key, str) and key.startswith(keys.prefix)]:
        if key == keys.draft_store:
            continue
        del state[key]


__all__ = [
    "consume_restored_notice",
    "ensure_upload_wizard",
    "reset_upload_wizard",
    "run_autosave_ticker",
    "use_upload_wizard",
]
