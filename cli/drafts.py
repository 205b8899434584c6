"""Inspect, validate or clear upload drafts stored by the file backend.

Examples::

    python -m cli.drafts show
    python -m cli.drafts validate --key currico_upload_draft --dir ~/.currico/drafts
    python -m cli.drafts clear --key my-test-draft
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Sequence

from config import load_wizard_settings
from core.errors import DraftStorageError
from models.listing import DraftSnapshot
from state.autosave import deserialize_snapshot
from state.storage import JsonFileDraftStorage
from wizard.validation import validate_all


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    settings = load_wizard_settings()
    parser = argparse.ArgumentParser(description="Manage stored upload wizard drafts.")
    parser.add_argument("command", choices=("show", "validate", "clear"), help="Action to perform.")
    parser.add_argument(
        "--key",
        default=settings.draft_storage_key,
        help="Draft storage key (defaults to DRAFT_STORAGE_KEY).",
    )
    parser.add_argument(
        "--dir",
        dest="directory",
        type=Path,
        default=settings.draft_storage_dir,
        help="Draft directory (defaults to DRAFT_STORAGE_DIR).",
    )
    parser.add_argument("--lang", choices=("de", "en"), default=settings.default_lang)
    return parser.parse_args(argv)


def _load(storage: JsonFileDraftStorage, key: str) -> DraftSnapshot | None:
    return deserialize_snapshot(storage.read(key))


def show(storage: JsonFileDraftStorage, key: str) -> int:
    snapshot = _load(storage, key)
    if snapshot is None:
        print(f"No usable draft stored under '{key}' in {storage.directory}.")
        return 1
    print(json.dumps(snapshot.to_payload(), indent=2, ensure_ascii=False))
    return 0


def validate(storage: JsonFileDraftStorage, key: str, lang: str) -> int:
    """Print the errors of every step; attachments are judged by the stored file names."""

    snapshot = _load(storage, key)
    if snapshot is None:
        print(f"No usable draft stored under '{key}' in {storage.directory}.")
        return 1
    results = validate_all(snapshot.form_data, files=snapshot.form_data.file_names, lang=lang)
    error_count = 0
    for step, errors in results.items():
        status = "ok" if not errors else f"{len(errors)} error(s)"
        print(f"Step {step}: {status}")
        for error in errors:
            print(f"  - {error.field}: {error.message}")
        error_count += len(errors)
    return 0 if error_count == 0 else 2


def clear(storage: JsonFileDraftStorage, key: str) -> int:
    path = storage.path_for(key)
    existed = path.exists()
    storage.remove(key)
    print(f"Removed {path}." if existed else f"No draft at {path}; nothing to clear.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    storage = JsonFileDraftStorage(args.directory)
    try:
        if args.command == "show":
            return show(storage, args.key)
        if args.command == "validate":
            return validate(storage, args.key, args.lang)
        return clear(storage, args.key)
    except DraftStorageError as exc:
        print(f"Draft storage error: {exc}")
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
