import io
import itertools
import random
import sys
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from photoSweep.application.services.asset_catalog import AssetCatalog
from photoSweep.application.services.scheduler import CooperativeScheduler
from photoSweep.application.services.triage_session import TriageSession
from photoSweep.application.services.undo_stack import UndoStack
from photoSweep.domain.models import Asset, DeleteOutcome
from photoSweep.domain.sources import IAssetSource
from photoSweep.errors import AssetUnavailableError, PermissionDeniedError
from photoSweep.events import EventBus
from photoSweep.library.liked_set import LikedSet
from photoSweep.library.trash_ledger import TrashLedger


class InMemoryAssetSource(IAssetSource):
    """Source collection held in memory, with switches for failure modes."""

    def __init__(self, count: int = 0, *, size: Callable[[int], int] = lambda i: 100 + i) -> None:
        self.assets: List[Asset] = [
            Asset(id=f"asset-{i:04d}", locator=f"mem://{i}", name=f"IMG_{i:04d}.JPG")
            for i in range(count)
        ]
        self.payloads = {asset.id: bytes([i % 256]) * size(i) for i, asset in enumerate(self.assets)}
        self.unreadable: set[str] = set()
        self.protected: set[str] = set()
        self.failing_offsets: set[int] = set()
        self.denied = False
        self.delete_error: Optional[Exception] = None
        self.page_calls: List[tuple[int, int]] = []
        self.delete_calls: List[List[str]] = []

    def ensure_access(self) -> None:
        if self.denied:
            raise PermissionDeniedError("Photo library access denied")

    def count(self) -> int:
        return len(self.assets)

    def page(self, offset: int, limit: int) -> List[Asset]:
        self.page_calls.append((offset, limit))
        if offset in self.failing_offsets:
            raise OSError("media store unavailable")
        return list(self.assets[offset:offset + limit])

    def open_bytes(self, asset_id: str) -> BinaryIO:
        if asset_id in self.unreadable or asset_id not in self.payloads:
            raise AssetUnavailableError(f"No bytes for {asset_id}")
        return io.BytesIO(self.payloads[asset_id])

    def delete_batch(self, asset_ids: Sequence[str]) -> DeleteOutcome:
        self.delete_calls.append(list(asset_ids))
        if self.delete_error is not None:
            raise self.delete_error
        deleted = [i for i in asset_ids if i in self.payloads and i not in self.protected]
        failed = [i for i in asset_ids if i not in deleted]
        for asset_id in deleted:
            del self.payloads[asset_id]
        self.assets = [asset for asset in self.assets if asset.id not in deleted]
        return DeleteOutcome(deleted=deleted, failed=failed)


@pytest.fixture
def clock():
    ticks = itertools.count(1_700_000_000_000, 1000)
    return lambda: next(ticks)


@pytest.fixture
def source() -> InMemoryAssetSource:
    return InMemoryAssetSource(120)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def scheduler() -> CooperativeScheduler:
    return CooperativeScheduler()


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def ledger(data_dir, source, event_bus, clock) -> TrashLedger:
    ledger = TrashLedger(data_dir, source, event_bus=event_bus, clock=clock)
    ledger.load()
    return ledger


@pytest.fixture
def liked(data_dir, event_bus) -> LikedSet:
    liked = LikedSet(data_dir, event_bus=event_bus)
    liked.load()
    return liked


@pytest.fixture
def make_catalog(source, scheduler, event_bus):
    def _make(**kwargs) -> AssetCatalog:
        kwargs.setdefault("page_size", 50)
        kwargs.setdefault("preload_threshold", 20)
        kwargs.setdefault("rng", random.Random(7))
        return AssetCatalog(kwargs.pop("source", source), scheduler, event_bus=event_bus, **kwargs)

    return _make


@pytest.fixture
def session(source, scheduler, event_bus, data_dir, clock, make_catalog) -> TriageSession:
    ledger = TrashLedger(data_dir, source, event_bus=event_bus, clock=clock)
    liked = LikedSet(data_dir, event_bus=event_bus)
    catalog = make_catalog()
    return TriageSession(source, ledger, liked, catalog, UndoStack(catalog), event_bus=event_bus)
