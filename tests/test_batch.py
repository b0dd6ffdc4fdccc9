"""Tests for batch conversion and archive writing."""

import io
import logging
import zipfile
from pathlib import Path

import pytest

from retail_ingest.batch import (
    ArchiveWriter,
    archive_file_name,
    collect_input_files,
    detect_files,
    process_file,
    run_batch,
)
from retail_ingest.config import CsvGenerationOptions
from retail_ingest.exceptions import ArchiveError, ConfigError
from retail_ingest.types import CsvFile, FileType

from conftest import STORES_HEADER, write_xlsx

FACTS_HEADER = ["Product UID*", "Store UID*", "Date*", "Stock"]


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    root = tmp_path / "in"
    root.mkdir()
    write_xlsx(root / "a_stores.xlsx", {"Stores": [STORES_HEADER, ["S1", "Shop A"]]})
    write_xlsx(root / "b_facts.xlsx", {"Facts": [FACTS_HEADER, ["P1", "S1", 45000, 4]]})
    write_xlsx(root / "c_unknown.xlsx", {"Sheet1": [["hello", "world"]]})
    (root / "d_broken.xlsx").write_bytes(b"garbage")
    (root / "notes.txt").write_text("ignored")
    return root


def test_archive_file_name(run_date) -> None:
    assert archive_file_name("weekly", run_date) == "weekly_20250131.zip"
    assert archive_file_name("", run_date) == "data_export_20250131.zip"
    assert archive_file_name(None, run_date) == "data_export_20250131.zip"


def test_collect_input_files(input_dir: Path, tmp_path: Path) -> None:
    nested = input_dir / "nested"
    nested.mkdir()
    write_xlsx(nested / "e.xlsx", {"S": [["x"]]})

    flat = collect_input_files(input_dir)
    assert [p.name for p in flat] == [
        "a_stores.xlsx",
        "b_facts.xlsx",
        "c_unknown.xlsx",
        "d_broken.xlsx",
    ]
    assert len(collect_input_files(input_dir, recursive=True)) == 5

    with pytest.raises(ConfigError, match="not found"):
        collect_input_files(tmp_path / "missing")
    (tmp_path / "empty").mkdir()
    with pytest.raises(ConfigError, match="No valid Excel files"):
        collect_input_files(tmp_path / "empty")


def test_run_batch_isolates_failures(input_dir: Path, tmp_path: Path, run_date) -> None:
    files = collect_input_files(input_dir)
    result = run_batch(files, tmp_path / "out", archive_name="weekly", run_date=run_date)

    statuses = [(o.path.name, o.status, o.file_type) for o in result.outcomes]
    assert statuses == [
        ("a_stores.xlsx", "success", FileType.STORE),
        ("b_facts.xlsx", "success", FileType.FACTS),
        ("c_unknown.xlsx", "error", FileType.UNKNOWN),
        ("d_broken.xlsx", "error", FileType.UNKNOWN),
    ]
    assert result.outcomes[2].updates[-1].message == "Skipping invalid file: c_unknown.xlsx"
    assert result.outcomes[3].updates[-1].message.startswith("Failed to process d_broken.xlsx")
    assert result.errors[0].startswith("Error in c_unknown.xlsx:")
    assert result.succeeded

    assert result.archive_path == tmp_path / "out" / "weekly_20250131.zip"
    with zipfile.ZipFile(result.archive_path) as zf:
        assert sorted(zf.namelist()) == ["facts_20250131.csv", "stores_20250131.csv"]
        facts = zf.read("facts_20250131.csv").decode()
    assert facts.splitlines()[1] == "P1,S1,2023-03-15,4,,,"


def test_parallel_batch_matches_sequential(input_dir: Path, tmp_path: Path, run_date) -> None:
    files = collect_input_files(input_dir)
    seq = run_batch(files, tmp_path / "seq", run_date=run_date)
    par = run_batch(files, tmp_path / "par", run_date=run_date, max_workers=4)
    assert [o.status for o in seq.outcomes] == [o.status for o in par.outcomes]
    assert seq.csv_files == par.csv_files


def test_no_archive_without_output(tmp_path: Path, run_date) -> None:
    path = write_xlsx(tmp_path / "empty_stores.xlsx", {"Stores": [STORES_HEADER, [None, "x"]]})
    result = run_batch([path], tmp_path / "out", run_date=run_date)
    assert result.archive_path is None
    assert result.outcomes[0].ok
    assert result.succeeded
    assert not (tmp_path / "out").exists()


def test_all_failures_is_not_success(tmp_path: Path, run_date) -> None:
    path = tmp_path / "broken.xlsx"
    path.write_bytes(b"garbage")
    result = run_batch([path], tmp_path / "out", run_date=run_date)
    assert not result.succeeded
    assert result.archive_path is None


def test_process_file_adds_to_archive(tmp_path: Path, run_date) -> None:
    path = write_xlsx(tmp_path / "stores.xlsx", {"Stores": [STORES_HEADER, ["S1", "A"]]})
    archive = ArchiveWriter()
    outcome = process_file(path, run_date, CsvGenerationOptions(), archive)
    assert outcome.ok
    assert archive.names == ["stores_20250131.csv"]
    assert outcome.updates[0].message.startswith("[stores.xlsx] Processing Stores file")


def test_duplicate_archive_entries_replace_with_warning(caplog) -> None:
    archive = ArchiveWriter()
    archive.add(CsvFile("stores_20250131.csv", "first"))
    with caplog.at_level(logging.WARNING, logger="retail_ingest.batch"):
        archive.add(CsvFile("stores_20250131.csv", "second"))
    assert "replacing" in caplog.text
    assert len(archive) == 1
    with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as zf:
        assert zf.read("stores_20250131.csv") == b"second"


def test_archive_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    archive = ArchiveWriter()
    archive.add(CsvFile("a.csv", "a\n"))
    with pytest.raises(ArchiveError):
        archive.write(blocker / "sub" / "out.zip")


def test_detect_files(input_dir: Path) -> None:
    results = detect_files(collect_input_files(input_dir))
    types = [d.file_type for _, d, _ in results]
    assert types == [FileType.STORE, FileType.FACTS, FileType.UNKNOWN, FileType.UNKNOWN]
    assert results[2][2] is None
    assert results[3][2]
