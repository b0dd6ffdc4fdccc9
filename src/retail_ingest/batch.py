"""Batch conversion of many spreadsheet files into one archive.

Each file goes through the pipeline independently and ends in exactly one
terminal outcome: success with N tables, success with no tables, or error
with a reason. A failing file never stops its siblings. Every CSV produced
is collected into a single ZIP archive named after the run date.
"""

from __future__ import annotations

import io
import logging
import threading
import zipfile
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional

from retail_ingest.config import DEFAULT_ARCHIVE_NAME, SPREADSHEET_SUFFIXES, CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import format_run_date
from retail_ingest.etl.detection import UNKNOWN_DETECTION, Detection, detect_file_type
from retail_ingest.etl.pipeline import convert_workbook
from retail_ingest.exceptions import ArchiveError, ConfigError, UnknownFormatError
from retail_ingest.types import CsvFile, FileType, StatusUpdate
from retail_ingest.workbook import read_workbook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileOutcome:
    """Terminal state of one input file.

    Attributes:
        path: Input file.
        file_type: Detected type (UNKNOWN when detection failed).
        status: "success" or "error".
        csv_files: Tables produced; empty for errors and empty inputs.
        error: Failure reason for error outcomes.
        updates: Status events emitted for this file, prefixed with its name.

    """

    path: Path
    file_type: FileType
    status: str
    csv_files: tuple[CsvFile, ...] = ()
    error: Optional[str] = None
    updates: tuple[StatusUpdate, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class BatchResult:
    """Outcomes of a batch run, in input order."""

    outcomes: tuple[FileOutcome, ...]
    archive_path: Optional[Path] = None

    @property
    def csv_files(self) -> list[CsvFile]:
        return [f for o in self.outcomes for f in o.csv_files]

    @property
    def errors(self) -> list[str]:
        return [f"Error in {o.path.name}: {o.error}" for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> bool:
        """True if any file produced output, or all processed files succeeded empty."""
        if self.csv_files:
            return True
        return any(o.ok for o in self.outcomes) and not self.errors


@dataclass
class ArchiveWriter:
    """Thread-safe collector of named CSV payloads, written as one ZIP.

    A payload added under an existing name replaces the earlier one.
    """

    _entries: dict[str, str] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add(self, csv_file: CsvFile) -> None:
        with self._lock:
            if csv_file.name in self._entries:
                logger.warning("Archive already holds %s; replacing it", csv_file.name)
            self._entries[csv_file.name] = csv_file.content

    def add_all(self, csv_files: Iterable[CsvFile]) -> None:
        for csv_file in csv_files:
            self.add(csv_file)

    @property
    def names(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def to_bytes(self) -> bytes:
        """Build the ZIP archive in memory."""
        buf = io.BytesIO()
        with self._lock, zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for name, content in self._entries.items():
                zf.writestr(name, content)
        return buf.getvalue()

    def write(self, path: Path) -> Path:
        """Write the archive to ``path``.

        Raises:
            ArchiveError: If the archive cannot be written.

        """
        try:
            payload = self.to_bytes()
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(payload)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveError(f"Could not write archive {path}: {e}") from e
        logger.info("Wrote %s (%d tables)", path, len(self))
        return path


def archive_file_name(archive_name: Optional[str], run_date: date) -> str:
    """``{archive_name}_{YYYYMMDD}.zip``; a blank name falls back to the default.

    Examples:
        >>> archive_file_name("  ", date(2025, 1, 31))
        'data_export_20250131.zip'

    """
    base = (archive_name or "").strip() or DEFAULT_ARCHIVE_NAME
    return f"{base}_{format_run_date(run_date)}.zip"


def collect_input_files(root: Path, recursive: bool = False) -> list[Path]:
    """List spreadsheet files (.xlsx, .xls) under a directory, sorted by path.

    Raises:
        ConfigError: If the directory is missing or holds no spreadsheet.

    """
    if not root.is_dir():
        raise ConfigError(f"Input dir not found: {root}")
    candidates = root.rglob("*") if recursive else root.glob("*")
    files = sorted(
        p for p in candidates if p.is_file() and p.suffix.lower() in SPREADSHEET_SUFFIXES
    )
    if not files:
        raise ConfigError(f"No valid Excel files (.xlsx, .xls) found in {root}")
    return files


def _detect_one(path: Path) -> tuple[Detection, Optional[str]]:
    try:
        return detect_file_type(read_workbook(path)), None
    except Exception as e:
        logger.warning("Detection failed for %s: %s", path, e)
        return UNKNOWN_DETECTION, str(e) or "Detection failed"


def detect_files(
    paths: Sequence[Path], max_workers: int = 4
) -> list[tuple[Path, Detection, Optional[str]]]:
    """Detect the type of many files concurrently.

    Detection is read-only, so files are probed in a thread pool. A file
    that cannot be read is reported as UNKNOWN together with the reason.

    Returns:
        ``(path, detection, error)`` triples in input order.

    """
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        results = list(pool.map(_detect_one, paths))
    return [(path, det, err) for path, (det, err) in zip(paths, results)]


def process_file(
    path: Path,
    run_date: date,
    options: CsvGenerationOptions,
    archive: Optional[ArchiveWriter] = None,
) -> FileOutcome:
    """Convert one file and record its terminal outcome.

    Produced CSVs are added to ``archive`` when one is given.
    """
    updates: list[StatusUpdate] = []

    def sink(update: StatusUpdate) -> None:
        updates.append(StatusUpdate(f"[{path.name}] {update.message}", update.status))

    try:
        workbook = read_workbook(path)
        result = convert_workbook(workbook, run_date, options, sink)
    except UnknownFormatError as e:
        updates.append(StatusUpdate(f"Skipping invalid file: {path.name}", "error"))
        logger.warning("Skipping invalid file %s", path)
        return FileOutcome(path, FileType.UNKNOWN, "error", error=str(e), updates=tuple(updates))
    except Exception as e:
        logger.error("Failed on %s: %s", path, e)
        message = str(e) or "An unknown error occurred."
        updates.append(StatusUpdate(f"Failed to process {path.name}: {message}", "error"))
        return FileOutcome(path, FileType.UNKNOWN, "error", error=message, updates=tuple(updates))

    if archive is not None:
        archive.add_all(result.csv_files)
    return FileOutcome(
        path,
        result.detected_type,
        "success",
        csv_files=result.csv_files,
        updates=tuple(updates),
    )


def run_batch(
    paths: Sequence[Path],
    output_dir: Path,
    archive_name: Optional[str] = DEFAULT_ARCHIVE_NAME,
    options: CsvGenerationOptions | None = None,
    run_date: date | None = None,
    max_workers: int = 1,
) -> BatchResult:
    """Convert every file and bundle all produced CSVs into one archive.

    Args:
        paths: Input spreadsheet files.
        output_dir: Directory receiving the ZIP archive.
        archive_name: Archive base name; blank falls back to "data_export".
        options: Side-table flags. Defaults to all on.
        run_date: Date embedded in file and archive names. Defaults to today.
        max_workers: Files converted in parallel. 1 keeps processing sequential.

    Returns:
        BatchResult with per-file outcomes and the archive path (None when
        no CSV was produced).

    Raises:
        ArchiveError: If the archive cannot be written.

    """
    options = options or CsvGenerationOptions()
    run_date = run_date or date.today()
    archive = ArchiveWriter()

    logger.info("Converting %d file(s) for run date %s", len(paths), run_date.isoformat())
    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(lambda p: process_file(p, run_date, options, archive), paths))
    else:
        outcomes = [process_file(p, run_date, options, archive) for p in paths]

    archive_path = None
    if len(archive):
        archive_path = archive.write(output_dir / archive_file_name(archive_name, run_date))
    elif any(o.ok for o in outcomes):
        logger.info("All valid files were processed but contained no data to export.")

    return BatchResult(outcomes=tuple(outcomes), archive_path=archive_path)
