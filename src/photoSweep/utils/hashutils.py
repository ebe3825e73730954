"""Hashing utilities."""

from __future__ import annotations

import os
from pathlib import Path

import xxhash


def compute_file_id(path: Path) -> str:
    """
    Return a hash of the file content, optimized for speed.
    For small files (< 2MB), hashes the entire content using XXH3.
    For large files, hashes a sample of the content (Head/Mid/Tail) + Size.
    """
    threshold = 2 * 1024 * 1024  # 2 MB

    with path.open("rb") as f:
        file_size = os.fstat(f.fileno()).st_size
        hasher = xxhash.xxh3_128()

        if file_size <= threshold:
            chunk_size = 1024 * 1024
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
            return hasher.hexdigest()

        hasher.update(file_size.to_bytes(8, "little"))
        chunk_size = 256 * 1024

        # Head
        hasher.update(f.read(chunk_size))

        # Middle
        if file_size > chunk_size * 2:
            f.seek(file_size // 2 - chunk_size // 2)
            hasher.update(f.read(chunk_size))

        # Tail
        f.seek(max(0, file_size - chunk_size))
        hasher.update(f.read(chunk_size))

    return hasher.hexdigest()
