"""Facts extractor.

Turns a daily sales/stock sheet into the ``facts`` table. Item id, store
id and a resolvable date are all mandatory; measures that fail to parse
are emitted as null.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import as_uid, format_date, is_truthy, parse_decimal, to_date
from retail_ingest.etl.rows import NormalizedRow
from retail_ingest.etl.serialize import FACTS_COLUMNS
from retail_ingest.etl.staging.common import make_table
from retail_ingest.types import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactColumns:
    """Source header labels of the Facts template."""

    item_uid: str = "Product UID*"
    store_uid: str = "Store UID*"
    date: str = "Date*"
    stock: str = "Stock"
    sold_qty: str = "Out sale"
    revenue: str = "Revenue"
    cogs: str = "COGS"


COLUMNS = FactColumns()


def fact_date(row: NormalizedRow) -> Optional[str]:
    """Resolve the row's date as YYYY-MM-DD, or None."""
    d = to_date(row.get(COLUMNS.date))
    return format_date(d) if d is not None else None


def fact_record(row: NormalizedRow) -> Optional[dict[str, Any]]:
    """Map one row to a fact record, or None when a mandatory field is missing."""
    item_uid = row.get(COLUMNS.item_uid)
    store_uid = row.get(COLUMNS.store_uid)
    if not (is_truthy(item_uid) and is_truthy(store_uid)):
        return None
    day = fact_date(row)
    if day is None:
        return None
    return {
        "item_uid": as_uid(item_uid),
        "store_uid": as_uid(store_uid),
        "date": day,
        "stock": parse_decimal(row.get(COLUMNS.stock)),
        "sold_qty": parse_decimal(row.get(COLUMNS.sold_qty)),
        "revenue": parse_decimal(row.get(COLUMNS.revenue)),
        "cogs": parse_decimal(row.get(COLUMNS.cogs)),
    }


def extract_facts(
    rows: Iterable[NormalizedRow],
    options: CsvGenerationOptions | None = None,
) -> list[Table]:
    """Extract the facts table.

    Args:
        rows: Normalized rows below the header.
        options: Unused; facts have no side tables.

    Returns:
        ``[facts]``, or an empty list when no row qualifies.

    """
    records = [rec for rec in map(fact_record, rows) if rec is not None]
    logger.debug("Facts: %d valid rows", len(records))
    if not records:
        return []
    return [make_table("facts", FACTS_COLUMNS, records)]
