"""Item master extractor, new template (v2).

Builds the ``masteritems`` table plus five optional side tables from the
v2 product master sheet.

Differences from v1:
- No item dedup: every row with a non-blank UID yields one item record.
- Brand, manufacturer and category identities use a dedicated UID column
  when it is filled, otherwise the matching name column.
- Categories span six levels. Every populated level is registered, and
  its parent is the closest shallower *populated* level on the same row,
  so gaps in the hierarchy are bridged.
- Twenty "Add N" attribute columns are carried through with a fixed
  per-position numeric or passthrough typing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import as_uid, is_blank, is_truthy, parse_decimal, parse_int
from retail_ingest.etl.rows import NormalizedRow
from retail_ingest.etl.serialize import (
    BARCODES_COLUMNS,
    BRANDS_COLUMNS,
    DIMENSIONS_V2_COLUMNS,
    ERPCATEGORIES_COLUMNS,
    MANUFACTURERS_COLUMNS,
    MASTERITEMS_V2_COLUMNS,
)
from retail_ingest.etl.staging.common import (
    dedup_key,
    main_unit_uid,
    make_table,
    side_table,
    uid_or_name,
)
from retail_ingest.types import Table

logger = logging.getLogger(__name__)

CATEGORY_DEPTH = 6
ADDITIONAL_COUNT = 20

# Positions of "Add N" columns copied as-is; all others are parsed as decimals
PASSTHROUGH_ADDITIONAL = frozenset({2, 3, 4, 7})


@dataclass(frozen=True)
class ItemMasterV2Columns:
    """Source header labels of the v2 item master template."""

    item_uid: str = "UID*"
    name: str = "Product name*"
    manufacturer_uid: str = "Manufacturer UID"
    manufacturer: str = "Manufacturer"
    brand_uid: str = "Brand UID"
    brand: str = "Brand"
    is_fractional: str = "Is fractional?"
    is_deleted: str = "To delete"
    barcode: str = "Barcode"
    main_unit_uid: tuple[str, ...] = ("Main Unit UID", "Main unit UID")
    unit: str = "Unit"
    width: str = "Width (cm, in)"
    height: str = "Height (cm, in)"
    depth: str = "Depth (cm, in)"

    @staticmethod
    def category_uid(level: int) -> str:
        return f"Category level {level} UID"

    @staticmethod
    def category_name(level: int) -> str:
        return f"Category level {level}"

    @staticmethod
    def additional(position: int) -> str:
        return f"Add {position}"


COLUMNS = ItemMasterV2Columns()


def _main_unit_value(row: NormalizedRow) -> Any:
    for label in COLUMNS.main_unit_uid:
        value = row.get(label)
        if is_truthy(value):
            return value
    return None


def item_category_uid(row: NormalizedRow) -> Any:
    """Most specific category id of a row.

    Category UID columns are scanned from level 6 down to 1 first; only if
    all are blank are the name columns scanned the same way.
    """
    for label in (COLUMNS.category_uid, COLUMNS.category_name):
        for level in range(CATEGORY_DEPTH, 0, -1):
            value = row.get(label(level))
            if not is_blank(value):
                return value
    return None


def additional_attributes(row: NormalizedRow) -> dict[str, Any]:
    """``additional_1..20`` values, typed by column position."""
    out: dict[str, Any] = {}
    for position in range(1, ADDITIONAL_COUNT + 1):
        value = row.get(COLUMNS.additional(position))
        if position in PASSTHROUGH_ADDITIONAL:
            out[f"additional_{position}"] = value
        else:
            out[f"additional_{position}"] = parse_decimal(value)
    return out


@dataclass
class _ItemMasterV2Accumulator:
    items: list[dict[str, Any]] = field(default_factory=list)
    barcodes: list[dict[str, Any]] = field(default_factory=list)
    dimensions: list[dict[str, Any]] = field(default_factory=list)
    brands: dict[str, dict[str, Any]] = field(default_factory=dict)
    manufacturers: dict[str, dict[str, Any]] = field(default_factory=dict)
    categories: dict[str, dict[str, Any]] = field(default_factory=dict)

    def add(self, row: NormalizedRow) -> None:
        raw_uid = row.get(COLUMNS.item_uid)
        if is_blank(raw_uid):
            return
        item_uid = as_uid(raw_uid)
        unit_uid = main_unit_uid(item_uid, _main_unit_value(row), row.get(COLUMNS.unit))

        brand_name = row.get(COLUMNS.brand)
        brand_uid = uid_or_name(row.get(COLUMNS.brand_uid), brand_name)
        manufacturer_name = row.get(COLUMNS.manufacturer)
        manufacturer_uid = uid_or_name(row.get(COLUMNS.manufacturer_uid), manufacturer_name)

        self.items.append(
            {
                "item_uid": item_uid,
                "name": row.get(COLUMNS.name),
                "manufacturer_uid": manufacturer_uid,
                "brand_uid": brand_uid,
                "is_fractional": parse_int(row.get(COLUMNS.is_fractional)),
                "main_unit_uid": unit_uid,
                "is_deleted": parse_int(row.get(COLUMNS.is_deleted)),
                **additional_attributes(row),
                "erp_category_uid": item_category_uid(row),
            }
        )

        barcode = row.get(COLUMNS.barcode)
        if is_truthy(barcode):
            self.barcodes.append({"item_uid": item_uid, "barcode": barcode, "is_main": 1})

        if brand_uid is not None:
            self.brands.setdefault(
                dedup_key(brand_uid),
                {
                    "brand_uid": brand_uid,
                    "name": brand_name if is_truthy(brand_name) else brand_uid,
                    "is_deleted": 0,
                },
            )

        unit = row.get(COLUMNS.unit)
        if is_truthy(unit):
            self.dimensions.append(
                {
                    "item_uid": item_uid,
                    "unit_name": unit,
                    "width": parse_decimal(row.get(COLUMNS.width)),
                    "height": parse_decimal(row.get(COLUMNS.height)),
                    "depth": parse_decimal(row.get(COLUMNS.depth)),
                    "coef": 1,
                    "is_deleted": 0,
                    "dimension_uid": unit_uid,
                }
            )

        self._add_categories(row)

        if manufacturer_uid is not None:
            self.manufacturers.setdefault(
                dedup_key(manufacturer_uid),
                {
                    "manufacturer_uid": manufacturer_uid,
                    "name": manufacturer_name if is_truthy(manufacturer_name) else manufacturer_uid,
                    "is_deleted": 0,
                },
            )

    def _add_categories(self, row: NormalizedRow) -> None:
        parent: Optional[Any] = None
        for level in range(1, CATEGORY_DEPTH + 1):
            name = row.get(COLUMNS.category_name(level))
            category_uid = uid_or_name(row.get(COLUMNS.category_uid(level)), name)
            if category_uid is None:
                continue
            key = dedup_key(category_uid)
            existing = self.categories.get(key)
            if existing is None:
                self.categories[key] = {
                    "erp_category_uid": category_uid,
                    "name": name,
                    "parent_category_uid": parent,
                }
            elif existing["name"] is None and name is not None:
                # name backfill only; parent linkage is fixed by the first row
                existing["name"] = name
            parent = category_uid

    def to_tables(self, options: CsvGenerationOptions) -> list[Table]:
        if not self.items:
            return []
        candidates = [
            make_table("masteritems", MASTERITEMS_V2_COLUMNS, self.items),
            side_table("barcodes", BARCODES_COLUMNS, self.barcodes, options),
            side_table("brands", BRANDS_COLUMNS, self.brands.values(), options),
            side_table("dimensions", DIMENSIONS_V2_COLUMNS, self.dimensions, options),
            side_table("erpcategories", ERPCATEGORIES_COLUMNS, self.categories.values(), options),
            side_table("manufacturers", MANUFACTURERS_COLUMNS, self.manufacturers.values(), options),
        ]
        return [t for t in candidates if t is not None]


def extract_item_master_v2(
    rows: Iterable[NormalizedRow],
    options: CsvGenerationOptions | None = None,
) -> list[Table]:
    """Extract masteritems and the v2 side tables.

    Args:
        rows: Normalized rows below the header.
        options: Side-table flags (barcodes, brands, dimensions,
            erpcategories, manufacturers).

    Returns:
        ``[masteritems, *side_tables]``, or an empty list when no row has a UID.

    """
    options = options or CsvGenerationOptions()
    acc = _ItemMasterV2Accumulator()
    for row in rows:
        acc.add(row)
    logger.debug(
        "Item master v2: %d items, %d brands, %d manufacturers, %d categories",
        len(acc.items),
        len(acc.brands),
        len(acc.manufacturers),
        len(acc.categories),
    )
    return acc.to_tables(options)
