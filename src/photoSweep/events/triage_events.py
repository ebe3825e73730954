"""Events published by the catalog, the ledgers and the triage session."""

from dataclasses import dataclass, field
from .bus import Event


@dataclass(kw_only=True)
class CatalogPageLoadedEvent(Event):
    appended: int
    loaded_count: int
    total_known: int


@dataclass(kw_only=True)
class CatalogCompletedEvent(Event):
    ordered_count: int
    total_known: int


@dataclass(kw_only=True)
class CatalogLoadFailedEvent(Event):
    offset: int
    message: str


@dataclass(kw_only=True)
class AssetTrashedEvent(Event):
    asset_id: str
    size_bytes: int


@dataclass(kw_only=True)
class AssetRestoredEvent(Event):
    asset_id: str
    size_bytes: int


@dataclass(kw_only=True)
class TrashRestoredAllEvent(Event):
    restored: int
    failed: int


@dataclass(kw_only=True)
class TrashPurgedEvent(Event):
    purged: int
    failed: int
    freed_bytes: int


@dataclass(kw_only=True)
class LedgerHealedEvent(Event):
    dropped_ids: list[str] = field(default_factory=list)
    document: str = ""


@dataclass(kw_only=True)
class DecisionRecordedEvent(Event):
    asset_id: str
    decision: str
    cursor: int


@dataclass(kw_only=True)
class DecisionUndoneEvent(Event):
    asset_id: str
    decision: str
    cursor: int


@dataclass(kw_only=True)
class LikedToggledEvent(Event):
    asset_id: str
    liked: bool
