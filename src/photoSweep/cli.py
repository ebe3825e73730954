"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.table import Table

from .appctx import AppContext, build_context
from .domain.models import SessionStats
from .errors import (
    AssetUnavailableError,
    LedgerBusyError,
    PermissionDeniedError,
    PhotoSweepError,
    StorageIOError,
    TrashEntryNotFoundError,
)
from .utils.logging import configure_logging
from .utils.pathutils import human_size

app = typer.Typer(help="Swipe through a photo folder and decide what to keep")
trash_app = typer.Typer(help="Inspect, restore or purge soft-deleted photos")
app.add_typer(trash_app, name="trash")

DATA_DIR_OPTION = typer.Option(None, "--data-dir", help="Private folder for trash copies and ledgers")
SOURCE_OPTION = typer.Option(
    None, "--source", help="Photo folder the originals live in (default: current directory)"
)

_EXPECTED_ERRORS = (PermissionDeniedError, TrashEntryNotFoundError, LedgerBusyError)


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PhotoSweepError as exc:
            prefix = "Error" if isinstance(exc, _EXPECTED_ERRORS) else "Unexpected error"
            typer.echo(f"{prefix}: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")) -> None:
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


def _context(source: Optional[Path], data_dir: Optional[Path], seed: Optional[int] = None) -> AppContext:
    return build_context(source or Path.cwd(), data_dir, seed=seed)


def _print_stats(stats: SessionStats) -> None:
    print(
        f"[green]kept {stats.kept}[/green]  [red]removed {stats.removed}[/red]  "
        f"left {stats.remaining}  loaded {stats.loaded}/{stats.total}  "
        f"trash {stats.trash_count} ({human_size(stats.trash_bytes)})  "
        f"freed {human_size(stats.freed_bytes)}  liked {stats.liked_count}"
    )


@app.command()
@_handle_errors
def review(
    source_dir: Optional[Path] = typer.Argument(
        None, exists=True, file_okay=False, help="Photo folder to review (default: current directory)"
    ),
    data_dir: Optional[Path] = DATA_DIR_OPTION,
    seed: Optional[int] = typer.Option(None, help="Shuffle seed for a reproducible order"),
) -> None:
    """Review photos one by one: keep, remove, undo or like."""

    ctx = _context(source_dir, data_dir, seed)
    session = ctx.session
    scheduler = ctx.scheduler
    session.start()

    while True:
        # Let ingestion make progress between prompts, one page at a time.
        scheduler.run_next()
        asset = session.current_asset
        if asset is None:
            if session.catalog.has_pending and not session.catalog.stalled and scheduler.run_next():
                continue
            if session.catalog.stalled:
                print("[yellow]Loading stopped after an error.[/yellow]")
            break

        heart = " [magenta]♥[/magenta]" if session.is_liked(asset.id) else ""
        print(f"[bold]{asset.name}[/bold]{heart}  [dim]{asset.locator}[/dim]")
        choice = typer.prompt("[k]eep [r]emove [u]ndo [l]ike [q]uit", default="k").strip().lower()
        try:
            if choice.startswith("q"):
                break
            if choice.startswith("r"):
                session.remove()
            elif choice.startswith("u"):
                record = session.undo()
                if record is None:
                    print("[yellow]Nothing to undo[/yellow]")
                else:
                    print(f"Undid {record.decision.value} of {record.asset.name}")
            elif choice.startswith("l"):
                liked = session.toggle_like(asset)
                print("Liked" if liked else "Unliked")
            else:
                session.keep()
        except (AssetUnavailableError, StorageIOError) as exc:
            print(f"[red]Could not remove {asset.name}: {exc}[/red]")
        _print_stats(session.stats())

    _print_stats(session.stats())
    if not session.catalog.has_pending and session.current_asset is None:
        print("[green]All photos reviewed.[/green]")


@app.command()
@_handle_errors
def stats(source: Optional[Path] = SOURCE_OPTION, data_dir: Optional[Path] = DATA_DIR_OPTION) -> None:
    """Show trash and liked totals."""

    ctx = _context(source, data_dir)
    ledger = ctx.session.ledger
    ledger.load()
    ctx.session.liked.load()
    print(f"Trash: {len(ledger)} photos, {human_size(ledger.total_trash_size())}")
    print(f"Liked: {len(ctx.session.liked)} photos")


@trash_app.command("list")
@_handle_errors
def trash_list(source: Optional[Path] = SOURCE_OPTION, data_dir: Optional[Path] = DATA_DIR_OPTION) -> None:
    """List soft-deleted photos, newest first."""

    ctx = _context(source, data_dir)
    ledger = ctx.session.ledger
    ledger.load()
    if not len(ledger):
        print("Trash is empty")
        return
    table = Table("ID", "Name", "Trashed", "Size")
    for entry in ledger.entries():
        trashed = datetime.fromtimestamp(entry.trashed_at_ms / 1000).strftime("%Y-%m-%d %H:%M")
        table.add_row(entry.asset_id, entry.name, trashed, human_size(entry.size_bytes))
    print(table)
    print(f"{len(ledger)} photos, {human_size(ledger.total_trash_size())}")


@trash_app.command("restore")
@_handle_errors
def trash_restore(
    asset_id: str,
    source: Optional[Path] = SOURCE_OPTION,
    data_dir: Optional[Path] = DATA_DIR_OPTION,
) -> None:
    """Take one photo back out of the trash."""

    ctx = _context(source, data_dir)
    ledger = ctx.session.ledger
    ledger.load()
    entry = ledger.restore(asset_id)
    print(f"[green]Restored {entry.name or entry.asset_id}")


@trash_app.command("restore-all")
@_handle_errors
def trash_restore_all(source: Optional[Path] = SOURCE_OPTION, data_dir: Optional[Path] = DATA_DIR_OPTION) -> None:
    """Take every photo back out of the trash."""

    ctx = _context(source, data_dir)
    ledger = ctx.session.ledger
    ledger.load()
    result = ledger.restore_all()
    print(f"[green]Restored {result.succeeded}[/green], failed {result.failed}")


@trash_app.command("purge")
@_handle_errors
def trash_purge(
    source: Optional[Path] = SOURCE_OPTION,
    data_dir: Optional[Path] = DATA_DIR_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Permanently delete the originals of every trashed photo."""

    ctx = _context(source, data_dir)
    ctx.source.ensure_access()
    ledger = ctx.session.ledger
    ledger.load()
    if len(ledger) and not yes:
        typer.confirm(
            f"Permanently delete {len(ledger)} photos ({human_size(ledger.total_trash_size())})?",
            abort=True,
        )
    result = ledger.purge()
    print(
        f"[green]Deleted {result.purged}[/green], failed {result.failed}, "
        f"freed {human_size(result.freed_bytes)}"
    )


if __name__ == "__main__":  # pragma: no cover
    app()
