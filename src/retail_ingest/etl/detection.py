"""File type detection and header row location.

Upstream systems export their data with irregular preambles, so neither
the sheet nor the header row can be assumed. Detection fingerprints a
workbook by keyword content; once the type is known, the header locator
finds the label row inside the chosen sheet.

Detection is strict: every keyword of a type must appear in one row.
Header location is loose: any cell containing any keyword is enough,
because the type is no longer ambiguous at that point.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from retail_ingest.config import DETECTION_SCAN_ROWS
from retail_ingest.etl.cleaning_utils import cell_text, clean_cell
from retail_ingest.types import FileType
from retail_ingest.workbook import Workbook

logger = logging.getLogger(__name__)

# --------------------------- fingerprints ---------------------------
FILE_TYPE_DEFINITIONS: dict[FileType, tuple[str, ...]] = {
    FileType.STORE: ("Store UID*",),
    FileType.STORE_ITEMS: ("Store UID*", "Product UID*", "In assortment?", "Purchase price"),
    FileType.FACTS: ("Product UID*", "Store UID*", "Date*"),
    FileType.ITEM_MASTER_V2: ("UID*", "Product name*", "Manufacturer UID"),
    FileType.ITEM_MASTER: ("UID*", "Product name*", "Barcode", "Manufacturer"),
    FileType.STOCK: ("StoreID", "ItemUID", "Quantity"),
    FileType.PRICE: ("ItemUID", "PriceList", "Price"),
}

# Stricter keyword sets first: looser definitions are subsets of stricter ones
TYPE_CHECK_ORDER: tuple[FileType, ...] = (
    FileType.ITEM_MASTER_V2,
    FileType.ITEM_MASTER,
    FileType.STORE_ITEMS,
    FileType.FACTS,
    FileType.STORE,
    FileType.STOCK,
    FileType.PRICE,
)

ROW_JOIN_DELIMITER = "|"


@dataclass(frozen=True)
class Detection:
    """Detected file type and the sheet that matched it."""

    file_type: FileType
    sheet_name: Optional[str]

    @property
    def is_known(self) -> bool:
        return self.file_type is not FileType.UNKNOWN and self.sheet_name is not None


UNKNOWN_DETECTION = Detection(FileType.UNKNOWN, None)


def _row_values(df_no_header: pd.DataFrame, i: int) -> list[Any]:
    return [clean_cell(v) for v in df_no_header.iloc[i].tolist()]


def row_matches_fingerprint(row: Sequence[Any], keywords: Sequence[str]) -> bool:
    """Check whether a row carries every keyword of a fingerprint.

    The row must hold at least one text cell, and the delimiter-joined text
    of all its cells must contain every keyword.

    Examples:
        >>> row_matches_fingerprint(["Store UID*", "Store name*"], ("Store UID*",))
        True
        >>> row_matches_fingerprint([1, 2], ("Store UID*",))
        False

    """
    if not any(isinstance(cell, str) for cell in row):
        return False
    joined = ROW_JOIN_DELIMITER.join(cell_text(cell) for cell in row)
    return all(kw in joined for kw in keywords)


def detect_file_type(workbook: Workbook, scan_rows: int = DETECTION_SCAN_ROWS) -> Detection:
    """Classify a workbook by scanning its sheets for keyword fingerprints.

    Types are tried in ``TYPE_CHECK_ORDER``; within a type, sheets are tried
    in workbook order and only the first ``scan_rows`` rows of each sheet
    are examined. The first matching (type, sheet) pair wins.

    Args:
        workbook: Workbook to classify. Never modified.
        scan_rows: Maximum number of leading rows scanned per sheet.

    Returns:
        Detection with the matched type and sheet, or ``UNKNOWN_DETECTION``.

    """
    heads = {name: workbook.frame(name).head(scan_rows) for name in workbook.sheet_names}
    for file_type in TYPE_CHECK_ORDER:
        keywords = FILE_TYPE_DEFINITIONS[file_type]
        for sheet_name, head in heads.items():
            for i in range(len(head)):
                if row_matches_fingerprint(_row_values(head, i), keywords):
                    logger.debug(
                        "Detected %s in sheet %r at row %d", file_type.value, sheet_name, i
                    )
                    return Detection(file_type, sheet_name)
    logger.debug("No fingerprint matched sheets %s", workbook.sheet_names)
    return UNKNOWN_DETECTION


def locate_header_row(grid: Sequence[Sequence[Any]], keywords: Sequence[str]) -> Optional[int]:
    """Find the first row where some text cell contains some keyword.

    Args:
        grid: Sheet rows as returned by ``Workbook.grid``.
        keywords: Fingerprint of the already-detected file type.

    Returns:
        Row index (0-based), or None if no row qualifies.

    """
    for i, row in enumerate(grid):
        if any(isinstance(cell, str) and any(kw in cell for kw in keywords) for cell in row):
            return i
    return None
