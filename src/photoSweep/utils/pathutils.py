"""Filesystem naming helpers for private storage."""

from __future__ import annotations

import re
from pathlib import Path

_UNSAFE = re.compile(r"[\x00-\x1f/\\:*?\"<>|]+")


def safe_file_name(name: str, fallback: str = "asset") -> str:
    """Reduce *name* to a single path component usable on every platform."""

    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE.sub("_", base).strip(" .")
    return cleaned or fallback


def unique_child_path(parent: Path, name: str) -> Path:
    """Return a path under *parent* that avoids overwriting existing files."""

    candidate = parent / name
    if not candidate.exists():
        return candidate

    stem = candidate.stem
    suffix = candidate.suffix
    counter = 1
    while True:
        next_candidate = parent / f"{stem} ({counter}){suffix}"
        if not next_candidate.exists():
            return next_candidate
        counter += 1


def human_size(num_bytes: int) -> str:
    """Format *num_bytes* the way file browsers do (``1.5 MB``)."""

    value = float(max(0, num_bytes))
    if value < 1024:
        return f"{int(value)} B"
    for unit in ("KB", "MB", "GB"):
        value /= 1024
        if value < 1024:
            return f"{value:.1f} {unit}"
    return f"{value / 1024:.1f} TB"
