"""Stores extractor.

Turns a "Stores" template sheet into the ``stores`` table. Every row with
a store id yields one record; integer fields fall back to 0 and the
licence start date is a fixed literal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Optional

from retail_ingest.config import STORE_LICENCE_START_DATE, CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import as_uid, is_truthy, parse_int
from retail_ingest.etl.rows import NormalizedRow
from retail_ingest.etl.serialize import STORES_COLUMNS
from retail_ingest.etl.staging.common import make_table
from retail_ingest.types import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreColumns:
    """Source header labels of the Stores template."""

    store_uid: str = "Store UID*"
    name: str = "Store name*"
    region: str = "Region"
    group_name: str = "Group name"
    floor_space: str = "Square"
    in_shelf: str = "In Shelf?"
    is_deleted: str = "To delete"


COLUMNS = StoreColumns()


def store_record(row: NormalizedRow) -> Optional[dict[str, Any]]:
    """Map one row to a store record, or None when the store id is missing."""
    store_uid = row.get(COLUMNS.store_uid)
    if not is_truthy(store_uid):
        return None
    return {
        "store_uid": as_uid(store_uid),
        "name": row.get(COLUMNS.name),
        "region": row.get(COLUMNS.region),
        "group_name": row.get(COLUMNS.group_name),
        "floor_space": parse_int(row.get(COLUMNS.floor_space)),
        "in_shelf": parse_int(row.get(COLUMNS.in_shelf)),
        "licence_start_date": STORE_LICENCE_START_DATE,
        "is_deleted": parse_int(row.get(COLUMNS.is_deleted)),
    }


def extract_stores(
    rows: Iterable[NormalizedRow],
    options: CsvGenerationOptions | None = None,
) -> list[Table]:
    """Extract the stores table.

    Args:
        rows: Normalized rows below the header.
        options: Unused; stores have no side tables.

    Returns:
        ``[stores]``, or an empty list when no row has a store id.

    """
    records = [rec for rec in map(store_record, rows) if rec is not None]
    logger.debug("Stores: %d valid rows", len(records))
    if not records:
        return []
    return [make_table("stores", STORES_COLUMNS, records)]
