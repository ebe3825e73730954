"""Persisted set of assets the user starred."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from ..config import CORRUPT_SUFFIX, LIKED_FILE_NAME, LIKED_SCHEMA_ID
from ..domain.models import Asset, LikedEntry
from ..errors import DocumentCorruptedError
from ..events import EventBus, LikedToggledEvent
from ..schemas import validate_liked
from ..utils.jsonio import quarantine, read_json, write_json
from ..utils.logging import get_logger

LOGGER = get_logger()


class LikedSet:
    """Liked assets keyed by id, independent of their trash state."""

    def __init__(
        self,
        data_dir: Path,
        *,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], int] = lambda: time.time_ns() // 1_000_000,
    ) -> None:
        self._path = Path(data_dir) / LIKED_FILE_NAME
        self._events = event_bus or EventBus()
        self._clock = clock
        self._entries: Dict[str, LikedEntry] = {}

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._entries

    def is_liked(self, asset_id: str) -> bool:
        return asset_id in self._entries

    def entries(self) -> List[LikedEntry]:
        return sorted(self._entries.values(), key=lambda entry: entry.liked_at_ms, reverse=True)

    def load(self) -> None:
        entries: Dict[str, LikedEntry] = {}
        if self._path.exists():
            try:
                payload = read_json(self._path)
                validate_liked(payload)
            except DocumentCorruptedError as exc:
                moved = quarantine(self._path, CORRUPT_SUFFIX)
                LOGGER.error("Discarding unreadable liked set (%s); kept copy at %s", exc, moved)
                self._persist({})
            else:
                for key, raw in payload["entries"].items():
                    entry = LikedEntry.from_dict(raw)
                    if key == entry.asset_id:
                        entries[key] = entry
        self._entries = entries

    def toggle(self, asset: Asset) -> bool:
        """Flip the liked state of *asset* and return the new state.

        The set is persisted before the in-memory state changes, so a failed
        write leaves both unchanged and propagates :class:`StorageIOError`.
        """

        entries = dict(self._entries)
        if asset.id in entries:
            del entries[asset.id]
            liked = False
        else:
            entries[asset.id] = LikedEntry(asset_id=asset.id, liked_at_ms=self._clock(), name=asset.name)
            liked = True
        self._persist(entries)
        self._entries = entries
        self._events.publish(LikedToggledEvent(asset_id=asset.id, liked=liked))
        return liked

    def _persist(self, entries: Dict[str, LikedEntry]) -> None:
        write_json(
            self._path,
            {
                "schema": LIKED_SCHEMA_ID,
                "entries": {asset_id: entry.to_dict() for asset_id, entry in entries.items()},
            },
        )
