from pathlib import Path
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import streamlit as st

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import config
from config import StorageBackend, WizardSettings
from state.storage import MemoryDraftStorage
from wizard.upload_wizard import UploadWizard


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield


class FragmentRecorder:
    """Stand-in for ``st.fragment`` that runs once and remembers timed fragments."""

    def __init__(self) -> None:
        self.registered: list[tuple[object, object, tuple, dict]] = []

    def __call__(self, func=None, *, run_every=None):
        def decorate(fn):
            def wrapper(*args, **kwargs):
                self.registered.append((run_every, fn, args, kwargs))
                return fn(*args, **kwargs)

            return wrapper

        return decorate(func) if func is not None else decorate

    def fire(self) -> None:
        """Simulate the ``run_every`` timer rerunning the latest fragment."""

        _, fn, args, kwargs = self.registered[-1]
        fn(*args, **kwargs)


@pytest.fixture(autouse=True)
def fragments(monkeypatch: pytest.MonkeyPatch) -> FragmentRecorder:
    recorder = FragmentRecorder()
    monkeypatch.setattr(st, "fragment", recorder, raising=False)
    return recorder


@pytest.fixture(autouse=True)
def _isolate_draft_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ``.env`` values and secrets out of the draft settings."""

    monkeypatch.setattr(config, "st", SimpleNamespace(secrets={}), raising=False)
    for name in (
        "DRAFT_STORAGE_KEY",
        "DRAFT_DEBOUNCE_SECONDS",
        "DRAFT_STORAGE_BACKEND",
        "DRAFT_STORAGE_DIR",
        "DRAFT_SERVER_URL",
        "DRAFT_SERVER_TOKEN",
        "DRAFT_SERVER_DEBOUNCE_SECONDS",
        "DRAFT_SERVER_TIMEOUT",
        "WIZARD_LANG",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


class FakeClock:
    """Monotonic clock advanced manually by tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class FakeWallClock:
    """Wall clock returning a fixed, manually advanced UTC timestamp."""

    def __init__(self, start: datetime | None = None) -> None:
        self.value = start or datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture
def settings() -> WizardSettings:
    return WizardSettings(draft_storage_backend=StorageBackend.MEMORY)


@pytest.fixture
def storage() -> MemoryDraftStorage:
    return MemoryDraftStorage()


@pytest.fixture
def make_wizard(settings, storage, clock, wall_clock, request):
    """Build wizards sharing one storage slot named after the test."""

    key = f"test-draft-{request.node.name}"

    def _factory(**overrides) -> UploadWizard:
        kwargs = {
            "settings": settings,
            "storage": storage,
            "storage_key": key,
            "clock": clock,
            "now": wall_clock,
        }
        kwargs.update(overrides)
        return UploadWizard(**kwargs)

    return _factory
