"""Shared fixtures for retail_ingest tests."""

from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from retail_ingest.types import Table

RUN_DATE = date(2025, 1, 31)

STORES_HEADER = ["Store UID*", "Store name*", "Region", "Square", "In Shelf?", "To delete"]

ITEM_MASTER_HEADER = [
    "UID*",
    "Product name*",
    "Barcode",
    "Manufacturer",
    "Brand",
    "Unit",
    "Width",
    "Height",
    "Length",
    "Segment Code",
    "Segment Description",
    "Family Code",
    "Family Description",
    "Class Code",
    "Class Description",
    "Brick Code",
    "Brick Description",
]


@pytest.fixture
def run_date() -> date:
    return RUN_DATE


def write_xlsx(path: Path, sheets: dict[str, list[list]]) -> Path:
    """Write header-less rows to a real .xlsx file through pandas/openpyxl."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, header=False, index=False)
    return path


def by_name(tables: list[Table]) -> dict[str, Table]:
    return {t.name: t for t in tables}
