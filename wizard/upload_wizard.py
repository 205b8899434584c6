"""The upload wizard facade handed to page components.

``UploadWizard`` composes validation, touch tracking, step navigation and the
draft persistence layer. It also owns the attached file handles, which are
never persisted: the ``fileNames``/``previewFileNames`` mirrors in
:attr:`UploadWizard.form_data` are projected from them on every read.
"""

from __future__ import annotations

import logging
import time
from collections.abc import MutableMapping
from datetime import datetime
from pathlib import PurePath
from typing import Any, Iterable, Mapping, Sequence

from config import WizardSettings, load_wizard_settings
from core.errors import DerivedFieldError, UnknownFieldError, WizardClosedError
from models.listing import DraftSnapshot, ListingFormData, default_form_data
from state.autosave import DraftPersistence, DraftState, SaveListener, WallClock, utc_now
from state.debounce import Clock
from state.remote_sync import DraftServerClient, RemoteDraftSync
from state.storage import DraftStorage, build_storage
from wizard import validation
from wizard.navigation import NavigationController
from wizard.touched import TouchTracker
from wizard.validation import FieldError

logger = logging.getLogger(__name__)

_DERIVED_ATTRIBUTES: frozenset[str] = frozenset({"file_names", "preview_file_names"})


def file_display_name(handle: object) -> str:
    """Return the name shown for an attached file handle."""

    name = getattr(handle, "name", None)
    if isinstance(name, str) and name:
        return PurePath(name).name
    if isinstance(handle, (str, PurePath)):
        return PurePath(handle).name
    return str(handle)


def project_file_names(handles: Iterable[object]) -> list[str]:
    return [file_display_name(handle) for handle in handles]


class UploadWizard:
    """Single entry point for the upload wizard's state.

    Args:
        settings: Resolved settings; loaded from secrets/environment when omitted.
        storage: Draft storage backend; built from ``settings`` when omitted.
        storage_key: Slot for the local draft; defaults to the configured key.
        clock: Monotonic clock for the debounce deadlines.
        now: Wall clock for ``lastSavedAt``.
        lang: Language for validation messages.
        server_client: Draft server client; created from ``settings`` when a
            server URL is configured.
        session_state: Mapping backing the ``session`` storage backend.
    """

    def __init__(
        self,
        *,
        settings: WizardSettings | None = None,
        storage: DraftStorage | None = None,
        storage_key: str | None = None,
        clock: Clock = time.monotonic,
        now: WallClock = utc_now,
        lang: str | None = None,
        server_client: DraftServerClient | None = None,
        session_state: MutableMapping[str, object] | None = None,
    ) -> None:
        self._settings = settings or load_wizard_settings()
        self._lang = lang or self._settings.default_lang
        self._closed = False
        self._form = default_form_data()
        self._attached_files: list[Any] = []
        self._preview_files: list[Any] = []
        self._restored_file_names: tuple[str, ...] = ()
        self._restored_preview_file_names: tuple[str, ...] = ()
        self._restored = False
        self._touch = TouchTracker()
        self._navigation = NavigationController(
            on_leave_step=self._touch.mark_step_touched,
            on_change=lambda _state: self._changed(),
        )
        self._persistence = DraftPersistence(
            storage if storage is not None else build_storage(self._settings, session_state=session_state),
            key=storage_key or self._settings.draft_storage_key,
            capture=self._capture,
            delay=self._settings.draft_debounce_seconds,
            clock=clock,
            now=now,
        )
        self._remote: RemoteDraftSync | None = None
        if server_client is None and self._settings.remote_sync_enabled:
            server_client = DraftServerClient.from_settings(self._settings)
        if server_client is not None:
            self._remote = RemoteDraftSync(
                server_client,
                capture=self._capture,
                delay=self._settings.draft_server_debounce_seconds,
                clock=clock,
                now=now,
            )
        self._restore()

    # ------------------------------------------------------------------
    # lifecycle

    def _restore(self) -> None:
        snapshot = self._persistence.load()
        if self._remote is not None:
            local_saved_at = snapshot.last_saved_at if snapshot is not None else None
            server_snapshot = self._remote.pull(local_saved_at)
            if server_snapshot is not None:
                snapshot = server_snapshot
                self._persistence.mark_restored(server_snapshot.last_saved_at)
        if snapshot is not None:
            self._hydrate(snapshot)

    def _hydrate(self, snapshot: DraftSnapshot) -> None:
        restored = snapshot.form_data
        self._restored_file_names = tuple(restored.file_names)
        self._restored_preview_file_names = tuple(restored.preview_file_names)
        self._form = restored.model_copy(update={"file_names": [], "preview_file_names": []}, deep=True)
        self._navigation.restore(snapshot.current_step, snapshot.visited_steps)
        self._restored = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise WizardClosedError("The upload wizard has been closed")

    def _capture(self) -> DraftState:
        return DraftState(
            form_data=self.form_data,
            current_step=self._navigation.current_step,
            visited_steps=self._navigation.visited_steps,
        )

    def _changed(self) -> None:
        self._persistence.schedule()
        if self._remote is not None:
            self._remote.schedule()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def settings(self) -> WizardSettings:
        return self._settings

    @property
    def lang(self) -> str:
        return self._lang

    @lang.setter
    def lang(self, value: str) -> None:
        self._lang = value

    @property
    def restored(self) -> bool:
        """``True`` when the current state was hydrated from a saved draft."""

        return self._restored

    def tick(self) -> bool:
        """Run due debounced writes; call this on every rerun.

        Returns:
            ``True`` when the local draft was written.
        """

        self._ensure_open()
        written = self._persistence.poll()
        if self._remote is not None:
            self._remote.poll()
        return written

    def flush_draft(self) -> bool:
        """Write pending changes now instead of waiting for the quiet period."""

        self._ensure_open()
        written = self._persistence.flush()
        if self._remote is not None:
            self._remote.flush()
        return written

    def close(self) -> None:
        """Cancel pending writes and release the file handles."""

        if self._closed:
            return
        self._persistence.cancel()
        if self._remote is not None:
            self._remote.cancel()
        self._attached_files = []
        self._preview_files = []
        self._closed = True
        logger.debug("Upload wizard closed")

    # ------------------------------------------------------------------
    # form data

    @property
    def form_data(self) -> ListingFormData:
        """Copy of the form data with the file-name mirrors projected."""

        return self._form.model_copy(
            update={
                "file_names": project_file_names(self._attached_files),
                "preview_file_names": project_file_names(self._preview_files),
            },
            deep=True,
        )

    @staticmethod
    def _resolve_writable(key: str) -> str:
        attribute = ListingFormData.resolve_field(key)
        if attribute is None:
            raise UnknownFieldError(key)
        if attribute in _DERIVED_ATTRIBUTES:
            raise DerivedFieldError(f"{key!r} is derived from the attached files; use set_attached_files()")
        return attribute

    @staticmethod
    def _stored_value(attribute: str, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            value = list(value)
        return ListingFormData.coerce_value(attribute, value)

    def update_field(self, key: str, value: Any) -> None:
        """Set one form field by its camelCase or attribute name."""

        self._ensure_open()
        attribute = self._resolve_writable(key)
        setattr(self._form, attribute, self._stored_value(attribute, value))
        self._changed()

    def update_fields(self, values: Mapping[str, Any]) -> None:
        """Set several fields at once; nothing is applied if any key is invalid."""

        self._ensure_open()
        resolved = {self._resolve_writable(key): value for key, value in values.items()}
        if not resolved:
            return
        for attribute, value in resolved.items():
            setattr(self._form, attribute, self._stored_value(attribute, value))
        self._changed()

    # ------------------------------------------------------------------
    # navigation

    @property
    def current_step(self) -> int:
        return self._navigation.current_step

    @property
    def visited_steps(self) -> tuple[int, ...]:
        return self._navigation.visited_steps

    def go_next(self) -> bool:
        self._ensure_open()
        return self._navigation.go_next()

    def go_back(self) -> bool:
        self._ensure_open()
        return self._navigation.go_back()

    def go_to_step(self, step: int) -> bool:
        self._ensure_open()
        return self._navigation.go_to_step(step)

    def can_navigate_to_step(self, step: int) -> bool:
        return self._navigation.can_navigate_to_step(step)

    # ------------------------------------------------------------------
    # touch tracking

    def mark_field_touched(self, field: str) -> None:
        self._ensure_open()
        self._touch.mark_touched(field)

    def mark_step_touched(self, step: int) -> None:
        self._ensure_open()
        self._touch.mark_step_touched(step)

    def is_touched(self, field: str) -> bool:
        return self._touch.is_touched(field)

    def touched_fields(self) -> dict[str, bool]:
        return self._touch.touched_fields()

    # ------------------------------------------------------------------
    # validation

    def errors_for_step(self, step: int, *, lang: str | None = None) -> list[FieldError]:
        return validation.errors_for_step(
            self._form,
            step,
            files=self._attached_files,
            lang=lang or self._lang,
        )

    def is_step_valid(self, step: int) -> bool:
        return validation.is_step_valid(self._form, step, files=self._attached_files)

    def is_step_complete(self, step: int) -> bool:
        return validation.is_step_complete(self._form, step, files=self._attached_files)

    def visible_errors(self, step: int, *, lang: str | None = None) -> list[FieldError]:
        """Errors of ``step`` whose field the user has touched."""

        return self._touch.visible_errors(self.errors_for_step(step, lang=lang))

    def validate_all(self, *, lang: str | None = None) -> dict[int, list[FieldError]]:
        return validation.validate_all(self._form, files=self._attached_files, lang=lang or self._lang)

    # ------------------------------------------------------------------
    # draft state

    @property
    def has_draft(self) -> bool:
        return self._persistence.has_draft

    @property
    def last_saved_at(self) -> datetime | None:
        return self._persistence.last_saved_at

    @property
    def is_saving(self) -> bool:
        return self._persistence.is_saving

    @property
    def save_pending(self) -> bool:
        return self._persistence.pending

    @property
    def storage_key(self) -> str:
        return self._persistence.key

    @property
    def server_synced(self) -> bool:
        return self._remote.server_synced if self._remote is not None else False

    @property
    def server_draft_id(self) -> str | None:
        return self._remote.server_draft_id if self._remote is not None else None

    def add_save_listener(self, listener: SaveListener) -> None:
        self._persistence.add_listener(listener)

    def clear_draft(self) -> None:
        """Delete the stored draft and restart the wizard from defaults."""

        self._ensure_open()
        self._persistence.clear()
        if self._remote is not None:
            self._remote.clear()
        self._form = default_form_data()
        self._navigation.reset()
        self._touch.reset()
        self._attached_files = []
        self._preview_files = []
        self._restored_file_names = ()
        self._restored_preview_file_names = ()
        self._restored = False
        logger.info("Upload draft cleared")

    # ------------------------------------------------------------------
    # transient file handles

    @property
    def attached_files(self) -> tuple[Any, ...]:
        return tuple(self._attached_files)

    def set_attached_files(self, files: Sequence[Any]) -> None:
        self._ensure_open()
        self._attached_files = list(files)
        self._changed()

    @property
    def preview_files(self) -> tuple[Any, ...]:
        return tuple(self._preview_files)

    def set_preview_files(self, files: Sequence[Any]) -> None:
        self._ensure_open()
        self._preview_files = list(files)
        self._changed()

    @property
    def restored_file_names(self) -> tuple[str, ...]:
        """File names recorded in the restored draft; the files must be re-selected."""

        return self._restored_file_names

    @property
    def restored_preview_file_names(self) -> tuple[str, ...]:
        return self._restored_preview_file_names


__all__ = ["UploadWizard", "file_display_name", "project_file_names"]
