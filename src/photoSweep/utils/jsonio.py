"""Atomic JSON document helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from ..config import TEMP_SUFFIX
from ..errors import DocumentCorruptedError, StorageIOError


def read_json(path: Path) -> Any:
    """Return the decoded JSON document stored at *path*.

    Raises :class:`DocumentCorruptedError` when the file is not valid UTF-8
    JSON and :class:`StorageIOError` when it cannot be read at all.
    """

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DocumentCorruptedError(f"{path} is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise StorageIOError(f"Could not read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentCorruptedError(f"{path} is not valid JSON: {exc}") from exc


def write_json(path: Path, payload: Any) -> Path:
    """Atomically replace *path* with the JSON encoding of *payload*.

    The document is written to a sibling temporary file, flushed to disk and
    then renamed over the target, so readers only ever observe the previous
    or the new version.
    """

    tmp_path = path.with_name(path.name + TEMP_SUFFIX)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2, sort_keys=True)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.replace(path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise StorageIOError(f"Could not write {path}: {exc}") from exc
    return path


def quarantine(path: Path, suffix: str) -> Path | None:
    """Move an unreadable document aside so a fresh one can take its place."""

    target = path.with_name(path.name + suffix)
    try:
        path.replace(target)
    except OSError:
        return None
    return target
