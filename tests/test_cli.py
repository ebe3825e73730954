import json
import os
from pathlib import Path

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required", exc_type=ImportError)

from typer.testing import CliRunner

from photoSweep.cli import app

runner = CliRunner()


@pytest.fixture
def library(tmp_path):
    root = tmp_path / "Photos"
    root.mkdir()
    for index in range(5):
        path = root / f"IMG_{index}.jpg"
        path.write_bytes(bytes([index]) * (10 + index))
        os.utime(path, (1_000 + index, 1_000 + index))
    return root


def _ledger(data_dir: Path) -> dict:
    return json.loads((data_dir / "trash_metadata.json").read_text(encoding="utf-8"))


def test_review_remove_then_purge(library, tmp_path):
    data_dir = tmp_path / "data"

    result = runner.invoke(
        app,
        ["review", str(library), "--data-dir", str(data_dir), "--seed", "1"],
        input="r\nk\nr\nu\nq\n",
    )
    assert result.exit_code == 0, result.output
    assert len(_ledger(data_dir)["entries"]) == 1
    assert len(list((data_dir / "trash").iterdir())) == 1

    listing = runner.invoke(app, ["trash", "list", "--source", str(library), "--data-dir", str(data_dir)])
    assert listing.exit_code == 0
    assert "1 photos" in listing.output

    purge = runner.invoke(
        app, ["trash", "purge", "--yes", "--source", str(library), "--data-dir", str(data_dir)]
    )
    assert purge.exit_code == 0, purge.output
    assert "Deleted 1" in purge.output
    assert len(list(library.iterdir())) == 4
    assert _ledger(data_dir)["entries"] == {}


def test_review_to_the_end(library, tmp_path):
    data_dir = tmp_path / "data"

    result = runner.invoke(
        app,
        ["review", str(library), "--data-dir", str(data_dir)],
        input="k\n" * 5,
    )

    assert result.exit_code == 0, result.output
    assert "All photos reviewed" in result.output


def test_restore_unknown_id_fails(library, tmp_path):
    result = runner.invoke(
        app,
        ["trash", "restore", "nope", "--source", str(library), "--data-dir", str(tmp_path / "data")],
    )

    assert result.exit_code == 1
    assert "Error: No trashed asset with id 'nope'" in result.output
    assert "Unexpected error" not in result.output


def test_restore_all(library, tmp_path):
    data_dir = tmp_path / "data"
    runner.invoke(app, ["review", str(library), "--data-dir", str(data_dir)], input="r\nr\nq\n")

    result = runner.invoke(
        app, ["trash", "restore-all", "--source", str(library), "--data-dir", str(data_dir)]
    )

    assert result.exit_code == 0
    assert "Restored 2" in result.output
    assert _ledger(data_dir)["entries"] == {}
    assert len(list(library.iterdir())) == 5


def test_source_defaults_to_working_directory_at_run_time(library, tmp_path, monkeypatch):
    data_dir = tmp_path / "data"
    monkeypatch.chdir(library)

    result = runner.invoke(app, ["review", "--data-dir", str(data_dir)], input="r\nq\n")
    assert result.exit_code == 0, result.output
    assert len(_ledger(data_dir)["entries"]) == 1

    listing = runner.invoke(app, ["trash", "list", "--data-dir", str(data_dir)])
    assert listing.exit_code == 0, listing.output
    assert "1 photos" in listing.output
