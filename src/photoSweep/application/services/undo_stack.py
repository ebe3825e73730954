"""Single-slot record of the last keep/remove decision."""

from __future__ import annotations

from typing import Optional

from ...domain.models import Asset, Decision, UndoRecord
from .asset_catalog import AssetCatalog


class UndoStack:
    """Remembers only the most recent decision, like the swipe UI it serves."""

    def __init__(self, catalog: AssetCatalog) -> None:
        self._catalog = catalog
        self._record: Optional[UndoRecord] = None

    @property
    def current(self) -> Optional[UndoRecord]:
        return self._record

    @property
    def can_undo(self) -> bool:
        return self._record is not None and self._catalog.cursor > 0

    def record(self, asset: Asset, decision: Decision) -> UndoRecord:
        self._record = UndoRecord(asset=asset, decision=Decision(decision))
        return self._record

    def consume(self) -> Optional[UndoRecord]:
        """Return and clear the record, or ``None`` when there is nothing to undo."""
        if not self.can_undo:
            return None
        record, self._record = self._record, None
        return record

    def restore_record(self, record: UndoRecord) -> None:
        """Put back a record whose reversal failed."""
        self._record = record

    def clear(self) -> None:
        self._record = None

    def invalidate(self, asset_id: str) -> None:
        """Forget the record if it refers to *asset_id*."""
        if self._record is not None and self._record.asset.id == asset_id:
            self._record = None
