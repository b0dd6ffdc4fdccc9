"""Spreadsheet reader adapter.

Reads every sheet of an Excel workbook into a header-less grid of typed
cells (text, number, date or None), preserving sheet and row order. The
rest of the package only sees the ``Workbook`` type defined here, so any
other reader can feed the pipeline through ``Workbook.from_rows``.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

from retail_ingest.etl.cleaning_utils import clean_cell
from retail_ingest.exceptions import MissingSheetError, WorkbookReadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Workbook:
    """Ordered, read-only collection of sheets parsed without headers.

    Attributes:
        sheets: Sheet name -> DataFrame read with ``header=None, dtype=object``.

    """

    sheets: Mapping[str, pd.DataFrame]

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def frame(self, sheet_name: str) -> pd.DataFrame:
        """Return the raw header-less frame of a sheet.

        Raises:
            MissingSheetError: If the sheet does not exist.

        """
        try:
            return self.sheets[sheet_name]
        except KeyError:
            raise MissingSheetError(f'Sheet "{sheet_name}" not found.') from None

    def grid(self, sheet_name: str) -> list[list[Any]]:
        """Return a sheet as a list of rows of cleaned cell values."""
        df = self.frame(sheet_name)
        return [[clean_cell(v) for v in row] for row in df.itertuples(index=False, name=None)]

    @classmethod
    def from_rows(cls, sheets: Mapping[str, Iterable[Iterable[Any]]]) -> Workbook:
        """Build a workbook from plain Python rows.

        Examples:
            >>> wb = Workbook.from_rows({"Sheet1": [["Store UID*", "Store name*"], ["S1", "A"]]})
            >>> wb.sheet_names
            ['Sheet1']

        """
        frames = {
            name: pd.DataFrame([list(r) for r in rows], dtype=object)
            for name, rows in sheets.items()
        }
        return cls(sheets=frames)


def read_workbook(source: str | Path | bytes) -> Workbook:
    """Read all sheets of a spreadsheet file.

    Args:
        source: Path to an .xlsx/.xls file, or the file's raw bytes.

    Returns:
        Workbook with one header-less frame per sheet.

    Raises:
        WorkbookReadError: If the content cannot be parsed as a spreadsheet.

    """
    handle: Any = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
    try:
        frames = pd.read_excel(handle, sheet_name=None, header=None, dtype=object)
    except FileNotFoundError:
        raise
    except Exception as e:
        raise WorkbookReadError(
            f"Cannot read spreadsheet (is it corrupted or wrong format?): {e}"
        ) from e
    logger.debug("Read workbook with sheets: %s", list(frames))
    return Workbook(sheets=frames)
