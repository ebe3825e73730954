"""Media type classification helpers for source collections."""

from __future__ import annotations

from pathlib import Path

IMAGE_EXTENSIONS: frozenset[str] = frozenset({
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".webp",
    ".heic",
    ".heif",
    ".heifs",
    ".heicf",
})

VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    ".mov",
    ".mp4",
    ".m4v",
    ".qt",
    ".avi",
    ".wmv",
    ".mkv",
})


def classify_path(path: Path) -> tuple[bool, bool]:
    """Return booleans indicating whether *path* names an image or a video."""

    suffix = path.suffix.lower()
    return suffix in IMAGE_EXTENSIONS, suffix in VIDEO_EXTENSIONS


def is_media_file(path: Path, *, include_videos: bool = True) -> bool:
    """Return ``True`` when *path* looks like a photo (or video) worth triaging."""

    if path.name.startswith("._"):
        # AppleDouble resource forks share the media suffix but hold no pixels.
        return False
    is_image, is_video = classify_path(path)
    return is_image or (include_videos and is_video)
