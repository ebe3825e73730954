from photoSweep.application.services.undo_stack import UndoStack
from photoSweep.domain.models import Decision


def test_consume_returns_and_clears(make_catalog, scheduler, source):
    catalog = make_catalog()
    catalog.start_load()
    scheduler.run_until_idle()
    undo = UndoStack(catalog)

    asset = catalog.advance()
    undo.record(asset, Decision.KEEP)

    record = undo.consume()
    assert record.asset == asset
    assert record.decision is Decision.KEEP
    assert undo.consume() is None


def test_record_overwrites_previous(make_catalog, scheduler):
    catalog = make_catalog()
    catalog.start_load()
    scheduler.run_until_idle()
    undo = UndoStack(catalog)

    first = catalog.advance()
    undo.record(first, Decision.KEEP)
    second = catalog.advance()
    undo.record(second, "remove")

    record = undo.consume()
    assert record.asset == second
    assert record.decision is Decision.REMOVE
    assert undo.consume() is None


def test_cannot_undo_past_start(make_catalog, scheduler):
    catalog = make_catalog()
    catalog.start_load()
    scheduler.run_until_idle()
    undo = UndoStack(catalog)

    undo.record(catalog.peek(), Decision.KEEP)

    assert catalog.cursor == 0
    assert undo.can_undo is False
    assert undo.consume() is None


def test_invalidate_only_matching_asset(make_catalog, scheduler):
    catalog = make_catalog()
    catalog.start_load()
    scheduler.run_until_idle()
    undo = UndoStack(catalog)
    asset = catalog.advance()
    undo.record(asset, Decision.REMOVE)

    undo.invalidate("someone-else")
    assert undo.current is not None
    undo.invalidate(asset.id)
    assert undo.current is None
