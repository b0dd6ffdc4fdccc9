"""Item master extractor, legacy template (v1).

Builds the ``masteritems`` table plus five optional side tables from the
v1 product master sheet.

Rules specific to v1:
- Items are deduplicated by trimmed UID; the first row defines the item,
  later rows with the same UID only add barcode and dimension records.
- Brand and manufacturer columns are bare names and double as identity.
- Categories come from four fixed levels (Segment > Family > Class > Brick).
  A category is registered the first time its code is seen, and its parent
  is the next-shallower level's code read from the same row.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import cell_text, is_missing, is_truthy, parse_decimal, parse_int
from retail_ingest.etl.rows import NormalizedRow
from retail_ingest.etl.serialize import (
    BARCODES_COLUMNS,
    BRANDS_COLUMNS,
    DIMENSIONS_V1_COLUMNS,
    ERPCATEGORIES_COLUMNS,
    MANUFACTURERS_COLUMNS,
    MASTERITEMS_V1_COLUMNS,
)
from retail_ingest.etl.staging.common import dedup_key, main_unit_uid, make_table, side_table
from retail_ingest.types import Table

logger = logging.getLogger(__name__)

# Shallowest first
CATEGORY_LEVELS = ("Segment", "Family", "Class", "Brick")


@dataclass(frozen=True)
class ItemMasterColumns:
    """Source header labels of the v1 item master template."""

    item_uid: str = "UID*"
    name: str = "Product name*"
    manufacturer: str = "Manufacturer"
    brand: str = "Brand"
    is_fractional: str = "Is fractional?"
    barcode: str = "Barcode"
    main_unit_uid: str = "Main Unit UID"
    unit: str = "Unit"
    width: str = "Width"
    height: str = "Height"
    depth: str = "Length"
    netweight: str = "Netweight"
    volume: str = "Volume"

    @staticmethod
    def category_code(level: str) -> str:
        return f"{level} Code"

    @staticmethod
    def category_name(level: str) -> str:
        return f"{level} Description"


COLUMNS = ItemMasterColumns()


def _item_uid(row: NormalizedRow) -> Optional[str]:
    value = row.get(COLUMNS.item_uid)
    if is_missing(value):
        return None
    uid = cell_text(value).strip()
    return uid or None


@dataclass
class _ItemMasterAccumulator:
    items: list[dict[str, Any]] = field(default_factory=list)
    barcodes: list[dict[str, Any]] = field(default_factory=list)
    dimensions: list[dict[str, Any]] = field(default_factory=list)
    brands: dict[str, None] = field(default_factory=dict)
    manufacturers: dict[str, None] = field(default_factory=dict)
    categories: dict[str, dict[str, Any]] = field(default_factory=dict)
    seen_uids: set[str] = field(default_factory=set)

    def add(self, row: NormalizedRow) -> None:
        uid = _item_uid(row)
        if uid is None:
            return
        unit_uid = main_unit_uid(uid, row.get(COLUMNS.main_unit_uid), row.get(COLUMNS.unit))

        if uid not in self.seen_uids:
            self.seen_uids.add(uid)
            self.items.append(self._item_record(uid, unit_uid, row))

        barcode = row.get(COLUMNS.barcode)
        if is_truthy(barcode):
            self.barcodes.append({"item_uid": uid, "barcode": barcode, "is_main": 1})

        brand = row.get(COLUMNS.brand)
        if is_truthy(brand):
            self.brands.setdefault(cell_text(brand), None)

        unit = row.get(COLUMNS.unit)
        if is_truthy(unit):
            self.dimensions.append(
                {
                    "item_uid": uid,
                    "unit_name": unit,
                    "width": parse_decimal(row.get(COLUMNS.width), default=0),
                    "height": parse_decimal(row.get(COLUMNS.height), default=0),
                    "depth": parse_decimal(row.get(COLUMNS.depth), default=0),
                    "netweight": parse_decimal(row.get(COLUMNS.netweight)),
                    "volume": parse_decimal(row.get(COLUMNS.volume)),
                    "dimension_uid": unit_uid,
                    "coef": 1,
                    "is_deleted": 0,
                }
            )

        self._add_categories(row)

        manufacturer = row.get(COLUMNS.manufacturer)
        if is_truthy(manufacturer):
            self.manufacturers.setdefault(cell_text(manufacturer), None)

    @staticmethod
    def _item_record(uid: str, unit_uid: Any, row: NormalizedRow) -> dict[str, Any]:
        fractional = row.get(COLUMNS.is_fractional)
        descriptions = [row.get(COLUMNS.category_name(level)) for level in CATEGORY_LEVELS]
        record = {
            "item_uid": uid,
            "name": row.get(COLUMNS.name),
            "manufacturer_uid": row.get(COLUMNS.manufacturer),
            "brand_uid": row.get(COLUMNS.brand),
            "is_fractional": parse_int(fractional) if is_truthy(fractional) else 0,
            "main_unit_uid": unit_uid,
            "erp_category_uid": row.get(COLUMNS.category_code("Brick")),
        }
        for i, description in enumerate(descriptions, start=1):
            record[f"additional_{i}"] = description
        return record

    def _add_categories(self, row: NormalizedRow) -> None:
        for depth, level in enumerate(CATEGORY_LEVELS):
            code = row.get(COLUMNS.category_code(level))
            if not is_truthy(code):
                continue
            key = dedup_key(code)
            if key in self.categories:
                continue
            parent = (
                row.get(COLUMNS.category_code(CATEGORY_LEVELS[depth - 1])) if depth > 0 else None
            )
            self.categories[key] = {
                "erp_category_uid": code,
                "name": row.get(COLUMNS.category_name(level)),
                "parent_category_uid": parent,
            }

    def to_tables(self, options: CsvGenerationOptions) -> list[Table]:
        if not self.items:
            return []
        candidates = [
            make_table("masteritems", MASTERITEMS_V1_COLUMNS, self.items),
            side_table("barcodes", BARCODES_COLUMNS, self.barcodes, options),
            side_table(
                "brands",
                BRANDS_COLUMNS,
                ({"brand_uid": b, "name": b, "is_deleted": 0} for b in self.brands),
                options,
            ),
            side_table("dimensions", DIMENSIONS_V1_COLUMNS, self.dimensions, options),
            side_table("erpcategories", ERPCATEGORIES_COLUMNS, self.categories.values(), options),
            side_table(
                "manufacturers",
                MANUFACTURERS_COLUMNS,
                ({"manufacturer_uid": m, "name": m, "is_deleted": 0} for m in self.manufacturers),
                options,
            ),
        ]
        return [t for t in candidates if t is not None]


def extract_item_master(
    rows: Iterable[NormalizedRow],
    options: CsvGenerationOptions | None = None,
) -> list[Table]:
    """Extract masteritems and the v1 side tables.

    Args:
        rows: Normalized rows starting at the first non-blank data row.
        options: Side-table flags (barcodes, brands, dimensions,
            erpcategories, manufacturers).

    Returns:
        ``[masteritems, *side_tables]``, or an empty list when no row has a UID.

    """
    options = options or CsvGenerationOptions()
    acc = _ItemMasterAccumulator()
    for row in rows:
        acc.add(row)
    logger.debug(
        "Item master v1: %d items, %d barcodes, %d dimensions, %d categories",
        len(acc.items),
        len(acc.barcodes),
        len(acc.dimensions),
        len(acc.categories),
    )
    return acc.to_tables(options)
