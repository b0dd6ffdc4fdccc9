"""Pipeline dispatcher: one spreadsheet in, CSV files out.

Per file the pipeline moves through:

    read -> detect -> (unknown: fail)
                   -> locate header -> normalize rows -> extract
                   -> (no rows: success without output)
                   -> serialize -> success

Every transition is reported to the optional status callback and logged.
A failure raises after an ``error`` event; it concerns this file only.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.detection import (
    FILE_TYPE_DEFINITIONS,
    Detection,
    detect_file_type,
    locate_header_row,
)
from retail_ingest.etl.rows import NormalizedRow, build_rows, first_non_blank_row
from retail_ingest.etl.serialize import serialize_tables
from retail_ingest.etl.staging import (
    extract_facts,
    extract_item_master,
    extract_item_master_v2,
    extract_store_items,
    extract_stores,
)
from retail_ingest.exceptions import (
    HeaderNotFoundError,
    UnknownFormatError,
    UnsupportedFileTypeError,
)
from retail_ingest.types import ConversionResult, FileType, StatusCallback, StatusUpdate, Table
from retail_ingest.workbook import Workbook, read_workbook

logger = logging.getLogger(__name__)

Extractor = Callable[[Sequence[NormalizedRow], CsvGenerationOptions], list[Table]]


@dataclass(frozen=True)
class ExtractorSpec:
    """How one file type is extracted.

    Attributes:
        label: Name used in status messages.
        extract: Row -> tables function.
        sheet_label: Sheet description used in the missing-header message.
        skip_blank_lead: Start data at the first non-blank row after the header.

    """

    label: str
    extract: Extractor
    sheet_label: str
    skip_blank_lead: bool = False


EXTRACTORS: dict[FileType, ExtractorSpec] = {
    FileType.STORE: ExtractorSpec("Stores", extract_stores, "the Stores sheet"),
    FileType.STORE_ITEMS: ExtractorSpec("Store Items", extract_store_items, "the Items sheet"),
    FileType.FACTS: ExtractorSpec("Facts", extract_facts, "the Facts sheet"),
    FileType.ITEM_MASTER: ExtractorSpec(
        "Masteritems", extract_item_master, "Masteritems file", skip_blank_lead=True
    ),
    FileType.ITEM_MASTER_V2: ExtractorSpec(
        "new Masteritems", extract_item_master_v2, "the new Masteritems file"
    ),
}


class _StatusEmitter:
    """Forwards status events to the caller and to the module logger."""

    def __init__(self, callback: Optional[StatusCallback]) -> None:
        self._callback = callback

    def __call__(self, message: str, status: str = "processing") -> None:
        if status == "error":
            logger.warning(message)
        else:
            logger.info(message)
        if self._callback is not None:
            self._callback(StatusUpdate(message=message, status=status))


def extract_tables(
    workbook: Workbook,
    detection: Detection,
    options: CsvGenerationOptions,
) -> list[Table]:
    """Locate the header in the detected sheet and run the type's extractor.

    Raises:
        UnsupportedFileTypeError: For recognized types without an extractor.
        MissingSheetError: If the detected sheet is absent.
        HeaderNotFoundError: If no header row can be located.

    """
    spec = EXTRACTORS.get(detection.file_type)
    if spec is None:
        raise UnsupportedFileTypeError(
            f'Processing for "{detection.file_type.value}" files is not yet implemented.'
        )
    grid = workbook.grid(detection.sheet_name)
    header_row = locate_header_row(grid, FILE_TYPE_DEFINITIONS[detection.file_type])
    if header_row is None:
        raise HeaderNotFoundError(f"Could not find a valid header row in {spec.sheet_label}.")

    data_start = header_row + 1
    if spec.skip_blank_lead:
        first = first_non_blank_row(grid, data_start)
        data_start = first if first is not None else len(grid)

    rows = build_rows(grid, header_row, data_start=data_start)
    logger.debug(
        "Sheet %r: header at row %d, %d data rows", detection.sheet_name, header_row, len(rows)
    )
    return spec.extract(rows, options)


def convert_workbook(
    workbook: Workbook,
    run_date: date,
    options: CsvGenerationOptions | None = None,
    status: Optional[StatusCallback] = None,
) -> ConversionResult:
    """Detect, extract and serialize one workbook.

    Args:
        workbook: Parsed spreadsheet.
        run_date: Date embedded in output file names.
        options: Side-table flags. Defaults to all on.
        status: Optional status event sink.

    Returns:
        ConversionResult with the CSV files (possibly none) and detected type.

    Raises:
        UnknownFormatError: If no fingerprint matches.
        ConversionError: Any other per-file failure (see ``extract_tables``).

    """
    options = options or CsvGenerationOptions()
    emit = _StatusEmitter(status)
    try:
        detection = detect_file_type(workbook)
        if not detection.is_known:
            raise UnknownFormatError(
                "Unknown file type. The file does not match any known templates."
            )
        spec = EXTRACTORS.get(detection.file_type)
        label = spec.label if spec else detection.file_type.value
        emit(f'Processing {label} file from sheet "{detection.sheet_name}"...')

        tables = extract_tables(workbook, detection, options)
        if not tables:
            emit(
                f"No valid data rows found in {label} file, skipping CSV generation.", "success"
            )
            return ConversionResult((), detection.file_type, detection.sheet_name)

        csv_files = serialize_tables(tables, run_date)
        emit(f"{label} processing complete.", "success")
        return ConversionResult(csv_files, detection.file_type, detection.sheet_name)
    except Exception as e:
        emit(str(e), "error")
        raise


def convert_file(
    source: str | Path | bytes,
    status: Optional[StatusCallback] = None,
    options: CsvGenerationOptions | None = None,
    run_date: date | None = None,
) -> ConversionResult:
    """Read a spreadsheet file and convert it.

    Args:
        source: Path to the file or its raw bytes.
        status: Optional status event sink.
        options: Side-table flags. Defaults to all on.
        run_date: Date embedded in output file names. Defaults to today.

    Returns:
        ConversionResult for the file.

    Examples:
        >>> result = convert_file("Stores.xlsx", run_date=date(2025, 1, 31))  # doctest: +SKIP
        >>> [f.name for f in result.csv_files]  # doctest: +SKIP
        ['stores_20250131.csv']

    """
    emit = _StatusEmitter(status)
    emit("Reading and analyzing Excel file...")
    try:
        workbook = read_workbook(source)
    except Exception as e:
        emit(str(e), "error")
        raise
    return convert_workbook(workbook, run_date or date.today(), options, status)
