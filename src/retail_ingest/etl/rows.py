"""Cell normalizer: header-keyed row objects.

Once the header row is located, every following grid row is turned into a
``NormalizedRow``: a mapping from trimmed header label to trimmed cell
value. Columns with a blank label are dropped. This view is the only
input the entity extractors consume.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from retail_ingest.etl.cleaning_utils import cell_text, is_blank, is_truthy, trim_cell

logger = logging.getLogger(__name__)

NormalizedRow = Mapping[str, Any]


def header_labels(header_row: Sequence[Any]) -> list[str]:
    """Trimmed text labels of a header row; empty cells (and 0) give ''."""
    return [cell_text(h).strip() if is_truthy(h) else "" for h in header_row]


def build_rows(
    grid: Sequence[Sequence[Any]],
    header_row: int,
    data_start: Optional[int] = None,
) -> list[NormalizedRow]:
    """Turn the rows below a header into label-keyed mappings.

    Args:
        grid: Sheet rows as returned by ``Workbook.grid``.
        header_row: Index of the header row.
        data_start: First data row index. Defaults to the row after the header.

    Returns:
        One mapping per data row. A label repeated in the header keeps the
        value of its rightmost column.

    """
    labels = header_labels(grid[header_row])
    start = header_row + 1 if data_start is None else data_start
    logger.debug("Header row %d labels: %s", header_row, labels)

    rows: list[NormalizedRow] = []
    for raw in grid[start:]:
        row: dict[str, Any] = {}
        for index, label in enumerate(labels):
            if label:
                row[label] = trim_cell(raw[index]) if index < len(raw) else None
        rows.append(row)
    return rows


def first_non_blank_row(grid: Sequence[Sequence[Any]], start: int) -> Optional[int]:
    """Index of the first row at or after ``start`` with any non-blank cell."""
    for i in range(start, len(grid)):
        if any(not is_blank(cell) for cell in grid[i]):
            return i
    return None
