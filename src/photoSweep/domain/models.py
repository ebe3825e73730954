from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..errors import InvalidAssetError


class Decision(str, Enum):
    KEEP = "keep"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class Asset:
    """Read-only view of one media item in the source collection."""

    id: str
    locator: str
    name: str
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise InvalidAssetError(f"Asset id must be a non-empty string: {self.id!r}")


@dataclass(frozen=True, slots=True)
class TrashEntry:
    asset_id: str
    trashed_at_ms: int
    stored_name: str
    size_bytes: int
    name: str = ""
    locator: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "locator": self.locator,
            "stored_name": self.stored_name,
            "trashed_at_ms": self.trashed_at_ms,
            "size_bytes": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> TrashEntry:
        return cls(
            asset_id=payload["asset_id"],
            trashed_at_ms=int(payload["trashed_at_ms"]),
            stored_name=payload["stored_name"],
            size_bytes=int(payload["size_bytes"]),
            name=payload.get("name", ""),
            locator=payload.get("locator", ""),
        )


@dataclass(frozen=True, slots=True)
class LikedEntry:
    asset_id: str
    liked_at_ms: int
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "liked_at_ms": self.liked_at_ms,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> LikedEntry:
        return cls(
            asset_id=payload["asset_id"],
            liked_at_ms=int(payload["liked_at_ms"]),
            name=payload.get("name", ""),
        )


@dataclass(frozen=True, slots=True)
class UndoRecord:
    asset: Asset
    decision: Decision


@dataclass(frozen=True, slots=True)
class CatalogState:
    """Snapshot of the catalog's working sequence."""

    ordered: tuple[Asset, ...]
    cursor: int
    total_known: int
    loaded_count: int

    @property
    def remaining(self) -> int:
        return len(self.ordered) - self.cursor


@dataclass(frozen=True, slots=True)
class CatalogEnd:
    """Returned by ``advance()`` when no asset is available.

    ``terminal`` is ``False`` while pages are still pending, meaning the
    catalog is only exhausted for now.
    """

    terminal: bool


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of a batch delete against the source collection."""

    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BatchResult:
    succeeded: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PurgeResult:
    purged: int = 0
    failed: int = 0
    freed_bytes: int = 0

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.purged, self.failed, self.freed_bytes)


@dataclass(frozen=True)
class SessionStats:
    kept: int = 0
    removed: int = 0
    processed: int = 0
    remaining: int = 0
    loaded: int = 0
    total: int = 0
    trash_count: int = 0
    trash_bytes: int = 0
    freed_bytes: int = 0
    liked_count: int = 0

    @property
    def progress(self) -> float:
        if self.total <= 0:
            return 1.0
        return min(1.0, self.loaded / self.total)
