"""Soft-delete ledger: private copies of removed assets plus their metadata."""

from __future__ import annotations

import os
import shutil
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional

from ..config import (
    COPY_CHUNK_SIZE,
    CORRUPT_SUFFIX,
    LEDGER_FILE_NAME,
    LEDGER_SCHEMA_ID,
    PARTIAL_COPY_SUFFIX,
    TRASH_DIR_NAME,
)
from ..domain.models import Asset, BatchResult, PurgeResult, TrashEntry
from ..domain.sources import IAssetSource
from ..errors import (
    AssetUnavailableError,
    DocumentCorruptedError,
    LedgerBusyError,
    PhotoSweepError,
    StorageIOError,
    TrashEntryNotFoundError,
)
from ..events import (
    AssetRestoredEvent,
    AssetTrashedEvent,
    EventBus,
    LedgerHealedEvent,
    TrashPurgedEvent,
    TrashRestoredAllEvent,
)
from ..schemas import validate_ledger
from ..utils.jsonio import quarantine, read_json, write_json
from ..utils.logging import get_logger
from ..utils.pathutils import safe_file_name, unique_child_path

LOGGER = get_logger()


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class TrashLedger:
    """Durable record of soft-deleted assets keyed by asset id.

    Removing an asset copies its bytes into ``<data_dir>/trash`` and records a
    :class:`TrashEntry`; the original stays untouched until :meth:`purge`.
    Every mutation rewrites ``trash_metadata.json`` atomically and only after
    the matching file operation succeeded, so the document on disk always
    describes copies that exist.

    Mutations are single-flight: a remove/restore/restore-all/purge issued
    while another one is still running raises :class:`LedgerBusyError`.
    """

    def __init__(
        self,
        data_dir: Path,
        source: IAssetSource,
        *,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._source = source
        self._events = event_bus or EventBus()
        self._clock = clock
        self._entries: Dict[str, TrashEntry] = {}
        self._freed_bytes = 0
        self._last_timestamp = 0
        self._busy = False

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def trash_dir(self) -> Path:
        return self._data_dir / TRASH_DIR_NAME

    @property
    def metadata_path(self) -> Path:
        return self._data_dir / LEDGER_FILE_NAME

    @property
    def freed_bytes(self) -> int:
        """Bytes soft-deleted during this session (never negative)."""
        return self._freed_bytes

    @property
    def busy(self) -> bool:
        return self._busy

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._entries

    def contains(self, asset_id: str) -> bool:
        return asset_id in self._entries

    def get(self, asset_id: str) -> Optional[TrashEntry]:
        return self._entries.get(asset_id)

    def live_ids(self) -> frozenset[str]:
        return frozenset(self._entries)

    def entries(self) -> List[TrashEntry]:
        """Live entries, most recently trashed first."""
        return sorted(self._entries.values(), key=lambda entry: entry.trashed_at_ms, reverse=True)

    def total_trash_size(self) -> int:
        return sum(entry.size_bytes for entry in self._entries.values())

    def stored_path(self, entry: TrashEntry) -> Path:
        return self.trash_dir / entry.stored_name

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def ensure_trash_directory(self) -> Path:
        """Create the private trash directory when missing and return it."""

        target = self.trash_dir
        if target.exists() and not target.is_dir():
            raise StorageIOError(f"Trash path exists but is not a directory: {target}")
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Could not prepare trash folder: {exc}") from exc
        return target

    def load(self) -> List[str]:
        """Read the persisted ledger and drop entries whose copy vanished.

        Returns the ids that were dropped.  When anything was dropped the
        trimmed ledger is written back immediately.
        """

        self.ensure_trash_directory()
        path = self.metadata_path
        entries: Dict[str, TrashEntry] = {}
        dropped: List[str] = []
        rewrite = False

        if path.exists():
            try:
                payload = read_json(path)
                validate_ledger(payload)
            except DocumentCorruptedError as exc:
                moved = quarantine(path, CORRUPT_SUFFIX)
                LOGGER.error("Discarding unreadable trash ledger (%s); kept copy at %s", exc, moved)
                payload = None
                rewrite = True
            if payload is not None:
                for key, raw in payload["entries"].items():
                    entry = TrashEntry.from_dict(raw)
                    if key != entry.asset_id or not self.stored_path(entry).is_file():
                        dropped.append(key)
                        continue
                    entries[entry.asset_id] = entry

        if dropped:
            LOGGER.warning(
                "Dropped %d trash entr%s whose private copy is missing",
                len(dropped),
                "y" if len(dropped) == 1 else "ies",
            )
            rewrite = True
        if rewrite:
            self._persist(entries)

        self._entries = entries
        self._freed_bytes = 0
        self._last_timestamp = max((e.trashed_at_ms for e in entries.values()), default=0)
        if dropped:
            self._events.publish(LedgerHealedEvent(dropped_ids=list(dropped), document=str(path)))
        return dropped

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def remove(self, asset: Asset) -> TrashEntry:
        """Soft-delete *asset* and return its entry.

        Removing an asset that already has a live entry returns that entry
        without copying again or counting its size twice.
        """

        existing = self._entries.get(asset.id)
        if existing is not None:
            return existing

        with self._exclusive():
            trash_dir = self.ensure_trash_directory()
            trashed_at = self._next_timestamp()
            stored = unique_child_path(
                trash_dir, f"{trashed_at}_{safe_file_name(asset.name, fallback=asset.id)}"
            )
            size = self._copy_original(asset, stored)
            entry = TrashEntry(
                asset_id=asset.id,
                trashed_at_ms=trashed_at,
                stored_name=stored.name,
                size_bytes=size,
                name=asset.name,
                locator=asset.locator,
            )
            entries = dict(self._entries)
            entries[asset.id] = entry
            try:
                self._persist(entries)
            except StorageIOError:
                stored.unlink(missing_ok=True)
                raise
            self._entries = entries
            self._freed_bytes += size

        LOGGER.debug("Trashed %s (%d bytes) as %s", asset.id, size, stored.name)
        self._events.publish(AssetTrashedEvent(asset_id=asset.id, size_bytes=size))
        return entry

    def restore(self, asset_id: str) -> TrashEntry:
        """Forget the soft-deletion of *asset_id* and return the removed entry."""

        with self._exclusive():
            entry = self._entries.get(asset_id)
            if entry is None:
                raise TrashEntryNotFoundError(f"No trashed asset with id {asset_id!r}")
            self._delete_copy(entry)
            entries = dict(self._entries)
            del entries[asset_id]
            self._persist(entries)
            self._entries = entries
            self._freed_bytes = max(0, self._freed_bytes - entry.size_bytes)

        self._events.publish(AssetRestoredEvent(asset_id=asset_id, size_bytes=entry.size_bytes))
        return entry

    def restore_all(self) -> BatchResult:
        """Restore every live entry, counting failures instead of aborting.

        Copies that cannot be deleted are left behind as orphans; the ledger
        is cleared either way.
        """

        with self._exclusive():
            snapshot = list(self._entries.values())
            restored = 0
            errors: List[str] = []
            for entry in snapshot:
                try:
                    self._delete_copy(entry)
                except StorageIOError as exc:
                    LOGGER.warning("Could not remove trash copy for %s: %s", entry.asset_id, exc)
                    errors.append(str(exc))
                    continue
                restored += 1
            released = sum(entry.size_bytes for entry in snapshot)
            self._persist({})
            self._entries = {}
            self._freed_bytes = max(0, self._freed_bytes - released)

        result = BatchResult(succeeded=restored, failed=len(errors), errors=errors)
        self._events.publish(TrashRestoredAllEvent(restored=result.succeeded, failed=result.failed))
        return result

    def purge(self) -> PurgeResult:
        """Permanently delete the originals of every live entry.

        The source may refuse some ids; those are counted as failed.  The
        private trash directory is wiped and the ledger cleared regardless,
        since the copies are no longer needed in either case.
        """

        with self._exclusive():
            snapshot = list(self._entries.values())
            if not snapshot:
                self._wipe_trash_directory()
                return PurgeResult()

            ids = [entry.asset_id for entry in snapshot]
            freed = sum(entry.size_bytes for entry in snapshot)
            try:
                outcome = self._source.delete_batch(ids)
                purged = len(set(outcome.deleted) & set(ids))
            except (PhotoSweepError, OSError) as exc:
                LOGGER.warning("Batch delete of %d originals failed: %s", len(ids), exc)
                purged = 0
            failed = len(ids) - purged
            if failed:
                LOGGER.warning("%d of %d originals could not be deleted", failed, len(ids))

            self._wipe_trash_directory()
            self._persist({})
            self._entries = {}
            self._freed_bytes = 0

        result = PurgeResult(purged=purged, failed=failed, freed_bytes=freed)
        self._events.publish(
            TrashPurgedEvent(purged=result.purged, failed=result.failed, freed_bytes=result.freed_bytes)
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if self._busy:
            raise LedgerBusyError("Another trash operation is still running")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _next_timestamp(self) -> int:
        stamp = max(self._clock(), self._last_timestamp + 1)
        self._last_timestamp = stamp
        return stamp

    def _copy_original(self, asset: Asset, target: Path) -> int:
        """Stream the original's bytes into *target* and return the size."""

        partial = target.with_name(target.name + PARTIAL_COPY_SUFFIX)
        try:
            with self._source.open_bytes(asset.id) as stream, partial.open("wb") as handle:
                shutil.copyfileobj(stream, handle, COPY_CHUNK_SIZE)
                handle.flush()
                os.fsync(handle.fileno())
            size = partial.stat().st_size
            partial.replace(target)
        except AssetUnavailableError:
            partial.unlink(missing_ok=True)
            raise
        except OSError as exc:
            partial.unlink(missing_ok=True)
            raise StorageIOError(f"Could not copy {asset.name or asset.id} to trash: {exc}") from exc
        return size

    def _delete_copy(self, entry: TrashEntry) -> None:
        try:
            self.stored_path(entry).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Could not delete trash copy {entry.stored_name}: {exc}") from exc

    def _wipe_trash_directory(self) -> None:
        target = self.trash_dir
        if target.exists():
            try:
                shutil.rmtree(target)
            except OSError as exc:
                LOGGER.warning("Could not wipe trash folder %s: %s", target, exc)
        self.ensure_trash_directory()

    def _persist(self, entries: Dict[str, TrashEntry]) -> None:
        payload = {
            "schema": LEDGER_SCHEMA_ID,
            "entries": {asset_id: entry.to_dict() for asset_id, entry in entries.items()},
        }
        write_json(self.metadata_path, payload)
