"""CSV serializer for canonical tables.

Column order is fixed per output table and never derived from the input
or from the records: a record is only ever read through the declared
columns. Values are rendered to text before pandas writes them, so
numbers keep their plain decimal form and nulls become empty fields.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date
from typing import Any

import pandas as pd

from retail_ingest.etl.cleaning_utils import cell_text, format_run_date
from retail_ingest.types import CsvFile, Table

logger = logging.getLogger(__name__)

# --------------------------- column orders ---------------------------
STORES_COLUMNS = (
    "store_uid",
    "name",
    "region",
    "group_name",
    "floor_space",
    "in_shelf",
    "licence_start_date",
    "is_deleted",
)

ITEMS_COLUMNS = (
    "item_uid",
    "store_uid",
    "is_active_planogram",
    "purchase_price",
    "retail_price",
    "external_supplier_uid",
)

SUPPLIERS_COLUMNS = ("supplier_uid", "name", "is_deleted")

FACTS_COLUMNS = ("item_uid", "store_uid", "date", "stock", "sold_qty", "revenue", "cogs")

MASTERITEMS_V1_COLUMNS = (
    "item_uid",
    "name",
    "manufacturer_uid",
    "brand_uid",
    "is_fractional",
    *(f"additional_{i}" for i in range(1, 5)),
    "main_unit_uid",
    "erp_category_uid",
)

MASTERITEMS_V2_COLUMNS = (
    "item_uid",
    "name",
    "manufacturer_uid",
    "brand_uid",
    "is_fractional",
    *(f"additional_{i}" for i in range(1, 21)),
    "main_unit_uid",
    "erp_category_uid",
    "is_deleted",
)

BARCODES_COLUMNS = ("item_uid", "barcode", "is_main")
BRANDS_COLUMNS = ("brand_uid", "name", "is_deleted")
MANUFACTURERS_COLUMNS = ("manufacturer_uid", "name", "is_deleted")

DIMENSIONS_V1_COLUMNS = (
    "item_uid",
    "unit_name",
    "width",
    "height",
    "depth",
    "netweight",
    "volume",
    "dimension_uid",
    "coef",
    "is_deleted",
)

DIMENSIONS_V2_COLUMNS = (
    "item_uid",
    "unit_name",
    "width",
    "height",
    "depth",
    "coef",
    "is_deleted",
    "dimension_uid",
)

ERPCATEGORIES_COLUMNS = ("erp_category_uid", "name", "parent_category_uid")


def render_value(value: Any) -> str:
    """Render one field. Null renders as ''; dates must already be strings."""
    return cell_text(value)


def to_csv_text(records: Iterable[Mapping[str, Any]], columns: Sequence[str]) -> str:
    """Serialize records to CSV text with a header line.

    Args:
        records: Flat field -> value mappings. Fields not in ``columns`` are ignored.
        columns: Authoritative output column order.

    Returns:
        CSV text ending with a newline. Fields holding a comma, a quote or
        a line break are quoted, with inner quotes doubled.

    Examples:
        >>> print(to_csv_text([{"a": 1, "b": 'say "hi", x'}], ["a", "b"]), end="")
        a,b
        1,"say ""hi"", x"

    """
    data = [[render_value(rec.get(col)) for col in columns] for rec in records]
    df = pd.DataFrame(data, columns=list(columns), dtype=object)
    return df.to_csv(index=False, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)


def csv_file_name(table: str, run_date: date) -> str:
    """``{table}_{YYYYMMDD}.csv`` for the given run date."""
    return f"{table}_{format_run_date(run_date)}.csv"


def serialize_table(table: Table, run_date: date) -> CsvFile:
    """Render one table as a named CSV file."""
    name = csv_file_name(table.name, run_date)
    logger.debug("Serializing %s (%d rows, %d cols)", name, len(table), len(table.columns))
    return CsvFile(name=name, content=to_csv_text(table.records, table.columns))


def serialize_tables(tables: Iterable[Table], run_date: date) -> tuple[CsvFile, ...]:
    """Render every non-empty table, preserving order."""
    return tuple(serialize_table(t, run_date) for t in tables if len(t) > 0)
