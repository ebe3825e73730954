import logging
import os
from pathlib import Path

import pytest

from photoSweep.application.services.asset_catalog import AssetCatalog
from photoSweep.application.services.scheduler import CooperativeScheduler
from photoSweep.errors import AssetUnavailableError, PermissionDeniedError
from photoSweep.infrastructure import folder_source
from photoSweep.infrastructure.folder_source import FolderAssetSource
from photoSweep.utils.hashutils import compute_file_id


def _make_photo(path: Path, payload: bytes, mtime: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def photo_dir(tmp_path):
    root = tmp_path / "Photos"
    _make_photo(root / "b.jpg", b"bbbb", 2_000)
    _make_photo(root / "a.JPG", b"aaaaaa", 1_000)
    _make_photo(root / "trip" / "c.heic", b"cc", 3_000)
    _make_photo(root / "notes.txt", b"not a photo", 500)
    _make_photo(root / "._a.JPG", b"resource fork", 500)
    _make_photo(root / ".hidden" / "d.png", b"dd", 500)
    return root


def test_pages_follow_modification_time(photo_dir):
    source = FolderAssetSource(photo_dir)

    assert source.count() == 3
    first = source.page(0, 2)
    rest = source.page(2, 2)

    assert [a.name for a in first + rest] == ["a.JPG", "b.jpg", "c.heic"]
    assert first[0].id == compute_file_id(photo_dir / "a.JPG")
    assert first[0].locator == str(photo_dir / "a.JPG")
    assert source.page(3, 2) == []


def test_excluded_folders_are_skipped(photo_dir):
    data_dir = photo_dir / "trip"
    source = FolderAssetSource(photo_dir, exclude=[data_dir])

    assert source.count() == 2


def test_open_and_delete(photo_dir):
    source = FolderAssetSource(photo_dir)
    source.count()
    asset = source.page(0, 1)[0]

    with source.open_bytes(asset.id) as stream:
        assert stream.read() == b"aaaaaa"

    outcome = source.delete_batch([asset.id, "unknown"])
    assert outcome.deleted == [asset.id]
    assert outcome.failed == ["unknown"]
    assert not (photo_dir / "a.JPG").exists()


def test_ids_resolve_without_paging(photo_dir):
    source = FolderAssetSource(photo_dir)
    target = compute_file_id(photo_dir / "trip" / "c.heic")

    outcome = source.delete_batch([target])

    assert outcome.deleted == [target]
    assert not (photo_dir / "trip" / "c.heic").exists()


def test_unknown_asset_is_unavailable(photo_dir):
    source = FolderAssetSource(photo_dir)
    source.count()

    with pytest.raises(AssetUnavailableError):
        source.open_bytes("missing")


def test_unreadable_file_is_skipped_not_fatal(tmp_path, monkeypatch, caplog):
    root = tmp_path / "Photos"
    for i in range(5):
        _make_photo(root / f"IMG_{i}.jpg", bytes([i]) * (i + 1), 1_000 + i)

    real_hash = folder_source.compute_file_id

    def hash_or_deny(path):
        if path.name == "IMG_2.jpg":
            raise PermissionError("denied")
        return real_hash(path)

    monkeypatch.setattr(folder_source, "compute_file_id", hash_or_deny)
    source = FolderAssetSource(root)
    scheduler = CooperativeScheduler()
    catalog = AssetCatalog(source, scheduler, page_size=5)

    with caplog.at_level(logging.WARNING, logger="photoSweep"):
        catalog.start_load()
        scheduler.run_until_idle()

    assert not catalog.stalled
    assert catalog.is_complete
    assert catalog.loaded_count == 5
    assert sorted(a.name for a in catalog.ordered) == ["IMG_0.jpg", "IMG_1.jpg", "IMG_3.jpg", "IMG_4.jpg"]
    assert "IMG_2.jpg" in caplog.text


def test_missing_folder_is_denied(tmp_path):
    source = FolderAssetSource(tmp_path / "nowhere")

    with pytest.raises(PermissionDeniedError):
        source.ensure_access()
