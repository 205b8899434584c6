import pytest

from config import StorageBackend, WizardSettings
from core.errors import DraftStorageError
from state.storage import (
    JsonFileDraftStorage,
    MemoryDraftStorage,
    SessionStateDraftStorage,
    build_storage,
)


def test_memory_storage_round_trip() -> None:
    storage = MemoryDraftStorage()

    assert storage.read("k") is None
    storage.write("k", "v")
    assert storage.read("k") == "v"
    storage.remove("k")
    storage.remove("k")
    assert storage.read("k") is None


def test_session_storage_uses_namespace() -> None:
    session: dict[str, object] = {}
    storage = SessionStateDraftStorage("wiz:upload:draft_store", session)

    storage.write("draft", "{}")

    assert session == {"wiz:upload:draft_store": {"draft": "{}"}}
    assert storage.read("draft") == "{}"
    storage.remove("draft")
    assert storage.read("draft") is None


def test_session_storage_defaults_to_streamlit_state() -> None:
    import streamlit as st

    SessionStateDraftStorage("ns").write("draft", "x")

    assert st.session_state["ns"] == {"draft": "x"}


def test_file_storage_round_trip(tmp_path) -> None:
    storage = JsonFileDraftStorage(tmp_path / "drafts")

    assert storage.read("currico_upload_draft") is None
    storage.write("currico_upload_draft", '{"a": "ä"}')

    path = storage.path_for("currico_upload_draft")
    assert path == tmp_path / "drafts" / "currico_upload_draft.json"
    assert storage.read("currico_upload_draft") == '{"a": "ä"}'
    assert list(path.parent.glob("*.tmp")) == []

    storage.remove("currico_upload_draft")
    storage.remove("currico_upload_draft")
    assert not path.exists()


def test_file_storage_sanitises_keys(tmp_path) -> None:
    storage = JsonFileDraftStorage(tmp_path)

    assert storage.path_for("../../etc/passwd").parent == tmp_path
    assert storage.path_for("...").name == "draft.json"


def test_file_storage_wraps_read_errors(tmp_path) -> None:
    storage = JsonFileDraftStorage(tmp_path)
    storage.path_for("bad").write_bytes(b"\xff\xfe\x00")

    with pytest.raises(DraftStorageError):
        storage.read("bad")


def test_file_storage_wraps_write_errors(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    storage = JsonFileDraftStorage(blocker)

    with pytest.raises(DraftStorageError):
        storage.write("draft", "{}")


@pytest.mark.parametrize(
    ("backend", "expected"),
    [
        (StorageBackend.MEMORY, MemoryDraftStorage),
        (StorageBackend.SESSION, SessionStateDraftStorage),
        (StorageBackend.FILE, JsonFileDraftStorage),
    ],
)
def test_build_storage(backend, expected, tmp_path) -> None:
    settings = WizardSettings(draft_storage_backend=backend, draft_storage_dir=tmp_path)

    assert isinstance(build_storage(settings, session_state={}), expected)
