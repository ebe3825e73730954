"""Incremental, shuffled catalog of assets awaiting a decision.

Pages are fetched from the source one at a time through a cooperative
scheduler, filtered against the trash ledger snapshot, shuffled locally
and appended.  Once the whole collection has been read, the part of the
sequence the user has not seen yet is shuffled once more so the final
order is not biased by page boundaries.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set, Union

from ...config import PAGE_SIZE, PRELOAD_THRESHOLD
from ...domain.models import Asset, CatalogEnd, CatalogState
from ...domain.sources import IAssetSource
from ...errors import IngestionError, PhotoSweepError
from ...events import (
    CatalogCompletedEvent,
    CatalogLoadFailedEvent,
    CatalogPageLoadedEvent,
    EventBus,
)
from ...utils.logging import get_logger
from .scheduler import Scheduler

LOGGER = get_logger()


@dataclass
class LoadHandle:
    """Tracks one ingestion run started by :meth:`AssetCatalog.start_load`.

    Discarding a run is done with :meth:`cancel`; pages already scheduled
    for it are dropped without touching the catalog.
    """

    generation: int
    total_known: int
    cancelled: bool = False
    done: bool = False
    error: Optional[IngestionError] = None

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.done)

    def cancel(self) -> None:
        self.cancelled = True


class AssetCatalog:
    """Randomized, growable sequence of assets with a forward cursor."""

    def __init__(
        self,
        source: IAssetSource,
        scheduler: Scheduler,
        *,
        page_size: int = PAGE_SIZE,
        preload_threshold: int = PRELOAD_THRESHOLD,
        background_ingestion: bool = True,
        rng: Optional[random.Random] = None,
        event_bus: Optional[EventBus] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._source = source
        self._scheduler = scheduler
        self._page_size = page_size
        self._preload_threshold = max(0, preload_threshold)
        self._background = background_ingestion
        self._rng = rng or random.Random()
        self._events = event_bus or EventBus()

        # State
        self._ordered: List[Asset] = []
        self._cursor: int = 0
        self._total_known: int = 0
        self._loaded_count: int = 0
        self._seen: Set[str] = set()
        self._excluded: frozenset[str] = frozenset()
        self._handle: Optional[LoadHandle] = None
        self._generation: int = 0
        self._in_flight: bool = False
        self._stalled: bool = False

    # -- properties --------------------------------------------------------

    @property
    def ordered(self) -> tuple[Asset, ...]:
        return tuple(self._ordered)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total_known(self) -> int:
        return self._total_known

    @property
    def loaded_count(self) -> int:
        return self._loaded_count

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def remaining(self) -> int:
        return len(self._ordered) - self._cursor

    @property
    def handle(self) -> Optional[LoadHandle]:
        return self._handle

    @property
    def loading(self) -> bool:
        return self._in_flight

    @property
    def stalled(self) -> bool:
        return self._stalled

    @property
    def is_complete(self) -> bool:
        return self._handle is not None and self._handle.done

    @property
    def has_pending(self) -> bool:
        """``True`` while more pages may still arrive for the current run."""
        handle = self._handle
        return handle is not None and handle.active and self._loaded_count < self._total_known

    @property
    def progress(self) -> float:
        if self._total_known <= 0:
            return 1.0 if self.is_complete else 0.0
        return min(1.0, self._loaded_count / self._total_known)

    @property
    def state(self) -> CatalogState:
        return CatalogState(
            ordered=tuple(self._ordered),
            cursor=self._cursor,
            total_known=self._total_known,
            loaded_count=self._loaded_count,
        )

    # -- public API --------------------------------------------------------

    def start_load(
        self,
        total_known: Optional[int] = None,
        excluded_ids: Iterable[str] = (),
    ) -> LoadHandle:
        """Begin a fresh ingestion run, replacing any previous state.

        *excluded_ids* are the live trash entries at the moment ingestion
        starts; those assets never enter the sequence.
        """
        if self._handle is not None:
            self._handle.cancel()
        if total_known is None:
            try:
                total_known = self._source.count()
            except OSError as exc:
                raise IngestionError(f"Could not count source assets: {exc}") from exc

        self._generation += 1
        self._ordered = []
        self._cursor = 0
        self._total_known = max(0, total_known)
        self._loaded_count = 0
        self._seen = set()
        self._excluded = frozenset(excluded_ids)
        self._in_flight = False
        self._stalled = False
        handle = LoadHandle(generation=self._generation, total_known=self._total_known)
        self._handle = handle

        LOGGER.debug(
            "Starting catalog load of %d assets (%d excluded)",
            self._total_known,
            len(self._excluded),
        )
        if self._total_known == 0:
            self._finish(handle)
        else:
            self._request_page()
        return handle

    def reset(self, excluded_ids: Iterable[str] = ()) -> LoadHandle:
        """Drop the sequence and counters and reload from scratch."""
        return self.start_load(None, excluded_ids)

    def cancel(self) -> None:
        """Abandon the current ingestion run; loaded pages stay usable."""
        if self._handle is not None:
            self._handle.cancel()
        self._in_flight = False

    def resume_load(self) -> bool:
        """Retry the page that failed last; returns whether a fetch was queued."""
        if not self._stalled:
            return False
        self._stalled = False
        if self._handle is not None:
            self._handle.error = None
        return self._request_page()

    def check_preload(self) -> bool:
        """Fetch the next page if the unviewed tail has run low.

        Level-triggered and idempotent: calling it again while a page is in
        flight, after ingestion finished, or while stalled on an error does
        nothing.
        """
        if self.remaining <= self._preload_threshold:
            return self._request_page()
        return False

    def peek(self) -> Optional[Asset]:
        if self._cursor < len(self._ordered):
            return self._ordered[self._cursor]
        return None

    def advance(self) -> Union[Asset, CatalogEnd]:
        """Return the asset under the cursor and move past it."""
        if self._cursor < len(self._ordered):
            asset = self._ordered[self._cursor]
            self._cursor += 1
            self.check_preload()
            return asset
        self.check_preload()
        return CatalogEnd(terminal=not self.has_pending)

    def step_back(self) -> bool:
        """Move the cursor back by one; used only when undoing a decision."""
        if self._cursor == 0:
            return False
        self._cursor -= 1
        return True

    # -- internal ----------------------------------------------------------

    def _request_page(self) -> bool:
        handle = self._handle
        if handle is None or not handle.active:
            return False
        if self._in_flight or self._stalled or self._loaded_count >= self._total_known:
            return False
        self._in_flight = True
        offset = self._loaded_count
        self._scheduler.call_soon(lambda: self._run_page(handle, offset))
        return True

    def _run_page(self, handle: LoadHandle, offset: int) -> None:
        if handle is not self._handle or not handle.active:
            return
        self._in_flight = False
        limit = min(self._page_size, self._total_known - offset)
        try:
            page = self._source.page(offset, limit)
        except (PhotoSweepError, OSError) as exc:
            self._stalled = True
            handle.error = IngestionError(f"Failed to load assets {offset}-{offset + limit}: {exc}")
            LOGGER.warning("%s", handle.error)
            self._events.publish(CatalogLoadFailedEvent(offset=offset, message=str(exc)))
            return

        if not page:
            # The collection shrank since it was counted.
            LOGGER.debug("Source ended early at %d of %d", offset, self._total_known)
            self._total_known = offset
            handle.total_known = offset
            self._finish(handle)
            return

        fresh: List[Asset] = []
        for asset in page:
            if asset.id in self._excluded or asset.id in self._seen:
                continue
            self._seen.add(asset.id)
            fresh.append(asset)
        self._rng.shuffle(fresh)
        self._ordered.extend(fresh)
        self._loaded_count = offset + limit

        self._events.publish(
            CatalogPageLoadedEvent(
                appended=len(fresh),
                loaded_count=self._loaded_count,
                total_known=self._total_known,
            )
        )

        if self._loaded_count >= self._total_known:
            self._finish(handle)
        elif self._background:
            self._request_page()
        else:
            self.check_preload()

    def _finish(self, handle: LoadHandle) -> None:
        # The asset under the cursor may already be on screen, so it and the
        # viewed prefix stay put; only what comes after it is reshuffled.
        start = self._cursor + 1
        tail = self._ordered[start:]
        self._rng.shuffle(tail)
        self._ordered[start:] = tail
        handle.done = True
        LOGGER.debug("Catalog complete: %d assets to review", len(self._ordered))
        self._events.publish(
            CatalogCompletedEvent(ordered_count=len(self._ordered), total_known=self._total_known)
        )
