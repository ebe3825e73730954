"""Orchestrates one keep-or-remove pass over the source collection."""

from __future__ import annotations

from typing import List, Optional, Union

from ...domain.models import (
    Asset,
    BatchResult,
    Decision,
    LikedEntry,
    PurgeResult,
    SessionStats,
    TrashEntry,
    UndoRecord,
)
from ...domain.sources import IAssetSource
from ...errors import (
    ApplicationError,
    IngestionError,
    PermissionDeniedError,
    PhotoSweepError,
    SessionNotStartedError,
)
from ...errors.handler import ErrorHandler, ErrorSeverity
from ...events import (
    CatalogLoadFailedEvent,
    DecisionRecordedEvent,
    DecisionUndoneEvent,
    EventBus,
)
from ...library.liked_set import LikedSet
from ...library.trash_ledger import TrashLedger
from ...utils.logging import get_logger
from .asset_catalog import AssetCatalog, LoadHandle
from .undo_stack import UndoStack

LOGGER = get_logger()


class TriageSession:
    """Entry point for the UI layer.

    The session owns the kept/removed counters and routes each decision to
    the trash ledger, the liked set and the undo slot.  Counters change only
    through the methods below, after the underlying operation succeeded.
    """

    def __init__(
        self,
        source: IAssetSource,
        ledger: TrashLedger,
        liked: LikedSet,
        catalog: AssetCatalog,
        undo: Optional[UndoStack] = None,
        *,
        event_bus: Optional[EventBus] = None,
        error_handler: Optional[ErrorHandler] = None,
    ) -> None:
        self._source = source
        self._ledger = ledger
        self._liked = liked
        self._catalog = catalog
        self._undo = undo or UndoStack(catalog)
        self._events = event_bus or EventBus()
        self._errors = error_handler
        self._kept = 0
        self._removed = 0
        self._started = False
        self._permission_error: Optional[PermissionDeniedError] = None
        self._events.subscribe(CatalogLoadFailedEvent, self._on_load_failed)

    # ------------------------------------------------------------------
    # Components and read-only state
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> AssetCatalog:
        return self._catalog

    @property
    def ledger(self) -> TrashLedger:
        return self._ledger

    @property
    def liked(self) -> LikedSet:
        return self._liked

    @property
    def undo_stack(self) -> UndoStack:
        return self._undo

    @property
    def events(self) -> EventBus:
        return self._events

    @property
    def started(self) -> bool:
        return self._started

    @property
    def kept_count(self) -> int:
        return self._kept

    @property
    def removed_count(self) -> int:
        return self._removed

    @property
    def processed_count(self) -> int:
        return self._kept + self._removed

    @property
    def busy(self) -> bool:
        return self._ledger.busy

    @property
    def current_asset(self) -> Optional[Asset]:
        return self._catalog.peek()

    @property
    def can_undo(self) -> bool:
        return self._undo.can_undo

    def stats(self) -> SessionStats:
        return SessionStats(
            kept=self._kept,
            removed=self._removed,
            processed=self.processed_count,
            remaining=self._catalog.remaining,
            loaded=self._catalog.loaded_count,
            total=self._catalog.total_known,
            trash_count=len(self._ledger),
            trash_bytes=self._ledger.total_trash_size(),
            freed_bytes=self._ledger.freed_bytes,
            liked_count=len(self._liked),
        )

    def trash_entries(self) -> List[TrashEntry]:
        return self._ledger.entries()

    def liked_entries(self) -> List[LikedEntry]:
        return self._liked.entries()

    def is_liked(self, asset_id: str) -> bool:
        return self._liked.is_liked(asset_id)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> LoadHandle:
        """Check access, load persisted state and begin ingesting the catalog."""

        self._check_access()
        self._ledger.load()
        self._liked.load()
        self._kept = 0
        self._removed = 0
        self._undo.clear()
        handle = self._catalog.start_load(excluded_ids=self._ledger.live_ids())
        self._started = True
        return handle

    def retry_access(self) -> LoadHandle:
        """Forget a previous permission failure and start again."""

        self._permission_error = None
        return self.start()

    def review_more(self) -> LoadHandle:
        """Start over with a freshly shuffled catalog and zeroed counters."""

        self._require_started()
        self._kept = 0
        self._removed = 0
        self._undo.clear()
        return self._catalog.reset(excluded_ids=self._ledger.live_ids())

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------
    def decide(self, decision: Union[Decision, str]) -> Optional[Asset]:
        """Apply *decision* to the current asset and move on.

        Returns the decided asset, or ``None`` when no asset is available
        yet.  A failed removal propagates its error and leaves the cursor,
        the counters and the undo slot untouched.
        """

        self._require_started()
        decision = Decision(decision)
        asset = self._catalog.peek()
        if asset is None:
            self._catalog.check_preload()
            return None

        if decision is Decision.REMOVE:
            self._ledger.remove(asset)
            self._removed += 1
        else:
            self._kept += 1
        self._catalog.advance()
        self._undo.record(asset, decision)
        self._events.publish(
            DecisionRecordedEvent(asset_id=asset.id, decision=decision.value, cursor=self._catalog.cursor)
        )
        return asset

    def keep(self) -> Optional[Asset]:
        return self.decide(Decision.KEEP)

    def remove(self) -> Optional[Asset]:
        return self.decide(Decision.REMOVE)

    def undo(self) -> Optional[UndoRecord]:
        """Reverse the last decision, if any."""

        self._require_started()
        record = self._undo.consume()
        if record is None:
            return None

        if record.decision is Decision.REMOVE:
            if self._ledger.contains(record.asset.id):
                try:
                    self._ledger.restore(record.asset.id)
                except PhotoSweepError:
                    self._undo.restore_record(record)
                    raise
            self._removed = max(0, self._removed - 1)
        else:
            self._kept = max(0, self._kept - 1)
        self._catalog.step_back()
        self._events.publish(
            DecisionUndoneEvent(
                asset_id=record.asset.id,
                decision=record.decision.value,
                cursor=self._catalog.cursor,
            )
        )
        return record

    def toggle_like(self, asset: Optional[Asset] = None) -> bool:
        """Flip the liked state of *asset* (the current asset by default)."""

        self._require_started()
        target = asset or self._catalog.peek()
        if target is None:
            raise ApplicationError("No asset to like")
        return self._liked.toggle(target)

    # ------------------------------------------------------------------
    # Trash view
    # ------------------------------------------------------------------
    def restore(self, asset_id: str) -> TrashEntry:
        self._require_started()
        entry = self._ledger.restore(asset_id)
        self._undo.invalidate(asset_id)
        return entry

    def restore_all(self) -> BatchResult:
        self._require_started()
        result = self._ledger.restore_all()
        self._drop_pending_removal()
        if result.failed:
            LOGGER.warning("Restored %d items, %d failed", result.succeeded, result.failed)
        return result

    def purge(self) -> PurgeResult:
        self._require_started()
        result = self._ledger.purge()
        self._drop_pending_removal()
        if result.failed:
            LOGGER.warning("Purged %d originals, %d could not be deleted", result.purged, result.failed)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_started(self) -> None:
        if not self._started:
            raise SessionNotStartedError("Call start() before using the session")

    def _check_access(self) -> None:
        if self._permission_error is not None:
            raise self._permission_error
        try:
            self._source.ensure_access()
        except PermissionDeniedError as exc:
            self._permission_error = exc
            if self._errors is not None:
                self._errors.handle(exc, ErrorSeverity.ERROR, {"operation": "start"})
            raise

    def _drop_pending_removal(self) -> None:
        record = self._undo.current
        if record is not None and record.decision is Decision.REMOVE:
            self._undo.clear()

    def _on_load_failed(self, event: CatalogLoadFailedEvent) -> None:
        if self._errors is None:
            return
        self._errors.handle(
            IngestionError(event.message),
            ErrorSeverity.ERROR,
            {"operation": "load_page", "offset": event.offset},
        )
