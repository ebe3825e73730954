"""Tests for incremental catalog ingestion."""

from __future__ import annotations

import random

import pytest

from conftest import InMemoryAssetSource
from photoSweep.domain.models import Asset, CatalogEnd
from photoSweep.errors import IngestionError
from photoSweep.events import CatalogCompletedEvent, CatalogLoadFailedEvent, CatalogPageLoadedEvent


def _ids(assets):
    return [asset.id for asset in assets]


def test_start_load_does_not_block(make_catalog, scheduler, source):
    catalog = make_catalog()

    handle = catalog.start_load()

    assert handle.total_known == 120
    assert catalog.loaded_count == 0
    assert catalog.ordered == ()
    assert scheduler.pending == 1
    assert source.page_calls == []


def test_background_ingestion_grows_monotonically(make_catalog, scheduler, event_bus):
    pages = []
    event_bus.subscribe(CatalogPageLoadedEvent, pages.append)
    catalog = make_catalog(page_size=50)
    catalog.start_load()

    seen_counts = []
    while scheduler.run_next():
        seen_counts.append((catalog.loaded_count, len(catalog.ordered)))

    assert seen_counts == [(50, 50), (100, 100), (120, 120)]
    assert [page.appended for page in pages] == [50, 50, 20]
    assert catalog.is_complete
    assert catalog.progress == 1.0


def test_completed_catalog_holds_source_minus_trashed(make_catalog, scheduler, source):
    excluded = {source.assets[i].id for i in (0, 3, 51, 119)}
    catalog = make_catalog(page_size=16)

    catalog.start_load(excluded_ids=excluded)
    scheduler.run_until_idle()

    assert catalog.loaded_count == catalog.total_known == 120
    ids = _ids(catalog.ordered)
    assert len(ids) == len(set(ids))
    assert set(ids) == {asset.id for asset in source.assets} - excluded


def test_duplicates_across_pages_are_dropped(make_catalog, scheduler):
    source = InMemoryAssetSource(30)
    source.assets[20] = source.assets[2]
    catalog = make_catalog(source=source, page_size=10)

    catalog.start_load()
    scheduler.run_until_idle()

    ids = _ids(catalog.ordered)
    assert len(ids) == 29
    assert len(set(ids)) == 29


def test_pages_are_shuffled_locally(make_catalog, scheduler, source):
    catalog = make_catalog(page_size=50, rng=random.Random(3))
    catalog.start_load()
    scheduler.run_next()

    first_page = _ids(catalog.ordered)
    assert sorted(first_page) == _ids(source.assets[:50])
    assert first_page != _ids(source.assets[:50])


def test_global_shuffle_keeps_viewed_prefix(make_catalog, scheduler):
    catalog = make_catalog(page_size=50, preload_threshold=0)
    catalog.start_load()
    scheduler.run_next()
    viewed = [catalog.advance() for _ in range(10)]

    scheduler.run_until_idle()

    assert catalog.is_complete
    assert list(catalog.ordered[:10]) == viewed
    assert catalog.cursor == 10


def test_global_shuffle_keeps_presented_asset(make_catalog, scheduler):
    for seed in range(20):
        catalog = make_catalog(page_size=50, preload_threshold=0, rng=random.Random(seed))
        catalog.start_load()
        scheduler.run_next()
        for _ in range(40):
            catalog.advance()
        shown = catalog.peek()

        scheduler.run_until_idle()

        assert catalog.is_complete
        assert catalog.peek() == shown
        assert catalog.advance() == shown


def test_decision_lands_on_presented_asset_after_completion(session, scheduler):
    session.start()
    scheduler.run_next()
    for _ in range(40):
        session.keep()
    shown = session.current_asset

    scheduler.run_until_idle()
    removed = session.remove()

    assert removed == shown
    assert session.ledger.contains(shown.id)


def test_preload_trigger_without_background(make_catalog, scheduler, source):
    catalog = make_catalog(page_size=50, preload_threshold=20, background_ingestion=False)
    catalog.start_load()
    scheduler.run_next()
    assert catalog.loaded_count == 50
    assert scheduler.pending == 0

    for _ in range(29):
        catalog.advance()
    assert catalog.remaining == 21
    assert scheduler.pending == 0

    catalog.advance()
    assert catalog.remaining == 20
    assert scheduler.pending == 1

    # Level-triggered: redundant checks do not queue a second fetch.
    assert catalog.check_preload() is False
    catalog.advance()
    assert scheduler.pending == 1

    scheduler.run_next()
    assert catalog.loaded_count == 100
    assert source.page_calls == [(0, 50), (50, 50)]


def test_advance_reports_end_of_catalog(make_catalog, scheduler):
    source = InMemoryAssetSource(3)
    catalog = make_catalog(source=source, page_size=2, preload_threshold=0, background_ingestion=False)
    catalog.start_load()

    assert catalog.advance() == CatalogEnd(terminal=False)
    scheduler.run_next()
    catalog.advance()
    catalog.advance()
    assert catalog.advance() == CatalogEnd(terminal=False)
    scheduler.run_next()
    last = catalog.advance()
    assert isinstance(last, Asset)
    assert catalog.advance() == CatalogEnd(terminal=True)


def test_failed_page_stalls_and_resumes(make_catalog, scheduler, source, event_bus):
    failures = []
    event_bus.subscribe(CatalogLoadFailedEvent, failures.append)
    source.failing_offsets.add(50)
    catalog = make_catalog(page_size=50)
    handle = catalog.start_load()

    scheduler.run_until_idle()

    assert catalog.loaded_count == 50
    assert len(catalog.ordered) == 50
    assert catalog.stalled
    assert isinstance(handle.error, IngestionError)
    assert [f.offset for f in failures] == [50]
    assert catalog.has_pending

    # No automatic retry while stalled.
    for _ in range(40):
        catalog.advance()
    assert scheduler.pending == 0

    source.failing_offsets.clear()
    assert catalog.resume_load() is True
    scheduler.run_until_idle()
    assert catalog.is_complete
    assert handle.error is None
    assert len(catalog.ordered) == 120


def test_cancelled_handle_drops_pending_pages(make_catalog, scheduler):
    catalog = make_catalog(page_size=50)
    handle = catalog.start_load()
    scheduler.run_next()

    handle.cancel()
    scheduler.run_until_idle()

    assert catalog.loaded_count == 50
    assert len(catalog.ordered) == 50
    assert not catalog.has_pending


def test_reset_reloads_from_scratch(make_catalog, scheduler, source):
    catalog = make_catalog(page_size=50)
    first = catalog.start_load()
    scheduler.run_until_idle()
    for _ in range(30):
        catalog.advance()

    second = catalog.reset(excluded_ids={source.assets[0].id})
    assert first.done and second is not first
    assert catalog.cursor == 0
    assert catalog.loaded_count == 0
    scheduler.run_until_idle()
    assert len(catalog.ordered) == 119


def test_superseded_run_does_not_touch_new_state(make_catalog, scheduler):
    catalog = make_catalog(page_size=50)
    catalog.start_load()
    catalog.start_load()

    scheduler.run_until_idle()

    assert catalog.loaded_count == 120
    assert len(catalog.ordered) == 120


def test_shrunken_source_ends_ingestion(make_catalog, scheduler, source):
    catalog = make_catalog(page_size=50)
    catalog.start_load()
    scheduler.run_next()
    del source.assets[40:]

    scheduler.run_until_idle()

    assert catalog.is_complete
    assert catalog.total_known == 50
    assert len(catalog.ordered) == 50


def test_empty_source_completes_immediately(make_catalog, scheduler, event_bus):
    completed = []
    event_bus.subscribe(CatalogCompletedEvent, completed.append)
    catalog = make_catalog(source=InMemoryAssetSource(0))

    catalog.start_load()

    assert catalog.is_complete
    assert scheduler.pending == 0
    assert catalog.advance() == CatalogEnd(terminal=True)
    assert completed[0].ordered_count == 0


def test_step_back_stops_at_start(make_catalog, scheduler):
    catalog = make_catalog()
    catalog.start_load()
    scheduler.run_until_idle()

    assert catalog.step_back() is False
    asset = catalog.advance()
    assert catalog.step_back() is True
    assert catalog.peek() == asset
    assert catalog.state.cursor == 0


def test_invalid_page_size(make_catalog):
    with pytest.raises(ValueError):
        make_catalog(page_size=0)
