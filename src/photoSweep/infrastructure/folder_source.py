"""Directory-backed implementation of the platform asset store."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, List, Optional, Sequence

from ..domain.models import Asset, DeleteOutcome
from ..domain.sources import IAssetSource
from ..errors import AssetUnavailableError, PermissionDeniedError
from ..media_classifier import is_media_file
from ..utils.hashutils import compute_file_id
from ..utils.logging import get_logger

LOGGER = get_logger()


class FolderAssetSource(IAssetSource):
    """Expose the media files below *root* as a source collection.

    The directory is scanned once per :meth:`count` call and the snapshot is
    ordered by modification time, then relative path, which keeps paging
    reproducible.  Asset ids are content hashes, so the same photo keeps its
    id across renames and sessions.
    """

    def __init__(
        self,
        root: Path,
        *,
        include_videos: bool = True,
        exclude: Iterable[Path] = (),
    ) -> None:
        self._root = Path(root)
        self._include_videos = include_videos
        self._exclude = [Path(path).resolve() for path in exclude]
        self._snapshot: Optional[List[Path]] = None
        self._paths_by_id: Dict[str, Path] = {}
        self._fully_indexed = False

    @property
    def root(self) -> Path:
        return self._root

    def ensure_access(self) -> None:
        if not self._root.is_dir():
            raise PermissionDeniedError(f"Source folder does not exist: {self._root}")
        if not os.access(self._root, os.R_OK | os.X_OK):
            raise PermissionDeniedError(f"Source folder is not readable: {self._root}")

    def count(self) -> int:
        self._snapshot = self._scan()
        self._fully_indexed = False
        return len(self._snapshot)

    def page(self, offset: int, limit: int) -> List[Asset]:
        if self._snapshot is None:
            self._snapshot = self._scan()
        assets: List[Asset] = []
        for path in self._snapshot[offset:offset + limit]:
            try:
                asset_id = compute_file_id(path)
                stat = path.stat()
            except FileNotFoundError:
                LOGGER.debug("Skipping %s: removed since the scan", path)
                continue
            except OSError as exc:
                # One unreadable file must not stall every later page.
                LOGGER.warning("Skipping unreadable file %s: %s", path, exc)
                continue
            self._paths_by_id.setdefault(asset_id, path)
            assets.append(
                Asset(
                    id=asset_id,
                    locator=str(path),
                    name=path.name,
                    created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                )
            )
        return assets

    def open_bytes(self, asset_id: str) -> BinaryIO:
        path = self._resolve(asset_id)
        if path is None:
            raise AssetUnavailableError(f"Unknown asset id: {asset_id}")
        try:
            return path.open("rb")
        except PermissionError as exc:
            raise AssetUnavailableError(f"Asset {path} is not readable: {exc}") from exc
        except OSError as exc:
            raise AssetUnavailableError(f"Asset {path} cannot be opened: {exc}") from exc

    def delete_batch(self, asset_ids: Sequence[str]) -> DeleteOutcome:
        deleted: List[str] = []
        failed: List[str] = []
        for asset_id in asset_ids:
            path = self._resolve(asset_id)
            if path is None:
                failed.append(asset_id)
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                # Already gone counts as removed.
                pass
            except OSError as exc:
                LOGGER.warning("Could not delete original %s: %s", path, exc)
                failed.append(asset_id)
                continue
            self._paths_by_id.pop(asset_id, None)
            deleted.append(asset_id)
        return DeleteOutcome(deleted=deleted, failed=failed)

    def _scan(self) -> List[Path]:
        self.ensure_access()
        found: List[tuple[float, str, Path]] = []
        for dirpath, dirnames, filenames in os.walk(self._root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not name.startswith(".") and not self._is_excluded(current / name)
            )
            for filename in filenames:
                path = current / filename
                if not is_media_file(path, include_videos=self._include_videos):
                    continue
                try:
                    mtime = path.stat().st_mtime
                except OSError:
                    continue
                found.append((mtime, path.relative_to(self._root).as_posix(), path))
        found.sort(key=lambda item: (item[0], item[1]))
        return [path for _, _, path in found]

    def _is_excluded(self, path: Path) -> bool:
        if not self._exclude:
            return False
        resolved = path.resolve()
        return any(resolved == excluded or excluded in resolved.parents for excluded in self._exclude)

    def _resolve(self, asset_id: str) -> Optional[Path]:
        """Map *asset_id* to a file, hashing the whole folder if it was never paged."""

        path = self._paths_by_id.get(asset_id)
        if path is not None or self._fully_indexed:
            return path
        snapshot = self._snapshot if self._snapshot is not None else self._scan()
        for candidate in snapshot:
            try:
                self._paths_by_id.setdefault(compute_file_id(candidate), candidate)
            except OSError:
                continue
        self._fully_indexed = True
        return self._paths_by_id.get(asset_id)
