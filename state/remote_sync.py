"""Optional server-side mirror of the upload draft.

When a draft server is configured, changes are mirrored with a longer quiet
period than the local slot. On start-up the server copy is adopted only if it
is newer than the local snapshot. Network trouble never reaches the wizard:
failures are logged and reflected in :attr:`RemoteDraftSync.server_synced`.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

import requests
from pydantic import ValidationError

from config import DEFAULT_SERVER_DEBOUNCE_SECONDS, WizardSettings
from constants.keys import DraftKeys
from core.errors import DraftStorageError
from models.listing import DraftSnapshot
from state.autosave import DraftState, WallClock, build_snapshot, parse_snapshot, utc_now
from state.debounce import Clock, Debouncer

logger = logging.getLogger(__name__)


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    return _as_aware(parsed)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ServerDraft:
    """Draft record as returned by the draft API."""

    id: str
    updated_at: datetime
    snapshot: DraftSnapshot | None


class DraftServerClient:
    """Thin wrapper around the ``/api/drafts`` endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 5.0,
        draft_type: str = DraftKeys.SERVER_DRAFT_TYPE,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._draft_type = draft_type
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, settings: WizardSettings) -> "DraftServerClient":
        if not settings.draft_server_url:
            raise ValueError("DRAFT_SERVER_URL is not configured")
        return cls(
            settings.draft_server_url,
            token=settings.draft_server_token,
            timeout=settings.draft_server_timeout,
        )

    @property
    def drafts_url(self) -> str:
        return f"{self._base_url}/api/drafts"

    def _json(self, response: requests.Response) -> Mapping[str, Any]:
        try:
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise DraftStorageError(f"Draft server request failed: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise DraftStorageError("Draft server returned an unexpected payload")
        return payload

    def fetch(self) -> ServerDraft | None:
        """Return the user's latest server draft, ``None`` when there is none."""

        try:
            response = self._session.get(
                self.drafts_url,
                params={"type": self._draft_type},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise DraftStorageError(f"Draft server unreachable: {exc}") from exc
        record = self._json(response).get("draft")
        if not isinstance(record, Mapping):
            return None
        draft_id = record.get("id")
        updated_at = _parse_timestamp(record.get("updated_at"))
        if not isinstance(draft_id, str) or updated_at is None:
            raise DraftStorageError("Draft server returned an incomplete draft record")
        return ServerDraft(id=draft_id, updated_at=updated_at, snapshot=_snapshot_from_record(record, updated_at))

    def save(self, snapshot: DraftSnapshot) -> str:
        """Upsert ``snapshot`` and return the server draft id."""

        try:
            response = self._session.post(
                self.drafts_url,
                json={"type": self._draft_type, "data": snapshot.to_payload()},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise DraftStorageError(f"Draft server unreachable: {exc}") from exc
        record = self._json(response).get("draft")
        draft_id = record.get("id") if isinstance(record, Mapping) else None
        if not isinstance(draft_id, str) or not draft_id:
            raise DraftStorageError("Draft server did not return a draft id")
        return draft_id

    def delete(self, draft_id: str) -> None:
        try:
            response = self._session.delete(f"{self.drafts_url}/{draft_id}", timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise DraftStorageError(f"Failed to delete server draft {draft_id}: {exc}") from exc


def _snapshot_from_record(record: Mapping[str, Any], updated_at: datetime) -> DraftSnapshot | None:
    data = record.get("data")
    if not isinstance(data, Mapping) or not isinstance(data.get("formData"), Mapping):
        return None
    payload = dict(data)
    payload.setdefault("lastSavedAt", updated_at.isoformat())
    try:
        snapshot = parse_snapshot(payload)
    except ValidationError:
        logger.warning("Ignoring malformed server draft %s", record.get("id"))
        return None
    # the server's own timestamp is authoritative for the mirror copy
    return snapshot.model_copy(update={"last_saved_at": updated_at})


class RemoteDraftSync:
    """Debounced mirror of the wizard state to the draft server."""

    def __init__(
        self,
        client: DraftServerClient,
        *,
        capture: Callable[[], DraftState],
        delay: float = DEFAULT_SERVER_DEBOUNCE_SECONDS,
        clock: Clock = time.monotonic,
        now: WallClock = utc_now,
    ) -> None:
        self._client = client
        self._capture = capture
        self._now = now
        self._debouncer = Debouncer(delay, self._push, clock=clock)
        self._server_synced = False
        self._server_draft_id: str | None = None

    @property
    def server_synced(self) -> bool:
        return self._server_synced

    @property
    def server_draft_id(self) -> str | None:
        return self._server_draft_id

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def pull(self, local_saved_at: datetime | None) -> DraftSnapshot | None:
        """Return the server snapshot when it is newer than the local one."""

        try:
            server_draft = self._client.fetch()
        except DraftStorageError as exc:
            logger.warning("Draft server unavailable; keeping local draft", exc_info=exc)
            return None
        if server_draft is None:
            return None
        self._server_draft_id = server_draft.id
        snapshot = server_draft.snapshot
        if snapshot is None:
            return None
        if local_saved_at is not None and server_draft.updated_at <= _as_aware(local_saved_at):
            self._server_synced = False
            return None
        self._server_synced = True
        logger.info("Adopting server draft %s from %s", server_draft.id, server_draft.updated_at.isoformat())
        return snapshot

    def schedule(self) -> None:
        self._debouncer.trigger()

    def poll(self) -> bool:
        return self._debouncer.poll()

    def flush(self) -> bool:
        return self._debouncer.flush()

    def cancel(self) -> bool:
        return self._debouncer.cancel()

    def _push(self) -> None:
        try:
            state = self._capture()
            snapshot = build_snapshot(
                state.form_data,
                current_step=state.current_step,
                visited_steps=state.visited_steps,
                saved_at=self._now(),
            )
            self._server_draft_id = self._client.save(snapshot)
        except (DraftStorageError, ValueError, TypeError) as exc:
            logger.warning("Failed to mirror draft to server", exc_info=exc)
            self._server_synced = False
            return
        self._server_synced = True

    def clear(self) -> None:
        self._debouncer.cancel()
        draft_id = self._server_draft_id
        self._server_draft_id = None
        self._server_synced = False
        if draft_id is None:
            return
        try:
            self._client.delete(draft_id)
        except DraftStorageError as exc:
            logger.warning("Failed to delete server draft", exc_info=exc)


__all__ = ["DraftServerClient", "RemoteDraftSync", "ServerDraft"]
