"""Store-items extractor.

Turns an assortment/pricing sheet into the ``items`` table (one record per
store x product row) and a deduplicated ``suppliers`` side table.

Prices and flags deliberately use different failure defaults: an empty or
unparseable price is null, while an unparseable assortment flag is 0.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import as_uid, is_truthy, parse_decimal, parse_int
from retail_ingest.etl.rows import NormalizedRow
from retail_ingest.etl.serialize import ITEMS_COLUMNS, SUPPLIERS_COLUMNS
from retail_ingest.etl.staging.common import dedup_key, make_table, side_table
from retail_ingest.types import Table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreItemColumns:
    """Source header labels of the Store-Items template."""

    store_uid: str = "Store UID*"
    item_uid: str = "Product UID*"
    in_assortment: str = "In assortment?"
    purchase_price: str = "Purchase price"
    retail_price: str = "Sale price"
    supplier_uid: str = "Supplier UID"
    supplier_name: str = "Supplier"


COLUMNS = StoreItemColumns()


@dataclass
class _StoreItemsAccumulator:
    items: list[dict[str, Any]] = field(default_factory=list)
    suppliers: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add(self, row: NormalizedRow) -> None:
        store_uid = row.get(COLUMNS.store_uid)
        item_uid = row.get(COLUMNS.item_uid)
        if not (is_truthy(store_uid) and is_truthy(item_uid)):
            return

        supplier_uid = row.get(COLUMNS.supplier_uid)
        self.items.append(
            {
                "item_uid": as_uid(item_uid),
                "store_uid": as_uid(store_uid),
                "is_active_planogram": parse_int(row.get(COLUMNS.in_assortment)),
                "purchase_price": parse_decimal(row.get(COLUMNS.purchase_price)),
                "retail_price": parse_decimal(row.get(COLUMNS.retail_price)),
                "external_supplier_uid": as_uid(supplier_uid),
            }
        )

        # first occurrence wins, even if a later row names the supplier differently
        if is_truthy(supplier_uid):
            key = dedup_key(supplier_uid)
            if key not in self.suppliers:
                self.suppliers[key] = {
                    "supplier_uid": as_uid(supplier_uid),
                    "name": row.get(COLUMNS.supplier_name),
                    "is_deleted": 0,
                }

    def to_tables(self, options: CsvGenerationOptions) -> list[Table]:
        if not self.items:
            return []
        tables = [make_table("items", ITEMS_COLUMNS, self.items)]
        suppliers = side_table("suppliers", SUPPLIERS_COLUMNS, self.suppliers.values(), options)
        if suppliers is not None:
            tables.append(suppliers)
        return tables


def extract_store_items(
    rows: Iterable[NormalizedRow],
    options: CsvGenerationOptions | None = None,
) -> list[Table]:
    """Extract the items table and, if enabled, the suppliers side table.

    Rows missing either the store id or the product id are discarded.

    Args:
        rows: Normalized rows below the header.
        options: Side-table flags; only ``suppliers`` applies.

    Returns:
        ``[items, suppliers?]``, or an empty list when no row qualifies.

    """
    options = options or CsvGenerationOptions()
    acc = _StoreItemsAccumulator()
    for row in rows:
        acc.add(row)
    logger.debug("Store items: %d items, %d suppliers", len(acc.items), len(acc.suppliers))
    return acc.to_tables(options)
