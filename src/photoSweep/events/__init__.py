from .bus import Event, EventBus, Subscription
from .triage_events import (
    AssetRestoredEvent,
    AssetTrashedEvent,
    CatalogCompletedEvent,
    CatalogLoadFailedEvent,
    CatalogPageLoadedEvent,
    DecisionRecordedEvent,
    DecisionUndoneEvent,
    LedgerHealedEvent,
    LikedToggledEvent,
    TrashPurgedEvent,
    TrashRestoredAllEvent,
)

__all__ = [
    "AssetRestoredEvent",
    "AssetTrashedEvent",
    "CatalogCompletedEvent",
    "CatalogLoadFailedEvent",
    "CatalogPageLoadedEvent",
    "DecisionRecordedEvent",
    "DecisionUndoneEvent",
    "Event",
    "EventBus",
    "LedgerHealedEvent",
    "LikedToggledEvent",
    "Subscription",
    "TrashPurgedEvent",
    "TrashRestoredAllEvent",
]
