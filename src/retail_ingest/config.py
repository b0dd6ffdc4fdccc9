"""Configuration for retail_ingest.

This module provides the side-table generation options and the constants
shared by the detector, the extractors and the batch runner.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields

from retail_ingest.exceptions import ConfigError

# Number of leading rows per sheet scanned for a type fingerprint
DETECTION_SCAN_ROWS = 20

# Stamped on every store record; no source column drives it
STORE_LICENCE_START_DATE = "2023-01-01"

# Days between the spreadsheet epoch (1899-12-30) and 1970-01-01
EXCEL_EPOCH_OFFSET_DAYS = 25569

DEFAULT_ARCHIVE_NAME = "data_export"

SPREADSHEET_SUFFIXES = (".xlsx", ".xls")


@dataclass(frozen=True)
class CsvGenerationOptions:
    """Which optional side tables to emit.

    Every flag defaults to True. Primary tables (stores, items, facts,
    masteritems) are always emitted when they have rows.

    Attributes:
        barcodes: Emit barcodes from item master files.
        brands: Emit brands from item master files.
        dimensions: Emit dimensions from item master files.
        erpcategories: Emit the category forest from item master files.
        manufacturers: Emit manufacturers from item master files.
        suppliers: Emit suppliers from store-items files.

    """

    barcodes: bool = True
    brands: bool = True
    dimensions: bool = True
    erpcategories: bool = True
    manufacturers: bool = True
    suppliers: bool = True

    @classmethod
    def from_mapping(cls, options: Mapping[str, bool] | None = None) -> CsvGenerationOptions:
        """Build options from a side-table name -> bool mapping.

        Args:
            options: Mapping of side-table name to flag. Absent keys default to True.

        Returns:
            CsvGenerationOptions instance.

        Raises:
            ConfigError: If the mapping names an unknown side table.

        Examples:
            >>> CsvGenerationOptions.from_mapping({"brands": False}).brands
            False

        """
        if options is None:
            return cls()
        known = cls.side_tables()
        unknown = sorted(set(options) - set(known))
        if unknown:
            raise ConfigError(f"Unknown side tables: {unknown}. Expected any of: {list(known)}")
        return cls(**{name: bool(flag) for name, flag in options.items()})

    @classmethod
    def side_tables(cls) -> tuple[str, ...]:
        """Names of all toggleable side tables."""
        return tuple(f.name for f in fields(cls))

    def is_enabled(self, table: str) -> bool:
        """Whether ``table`` should be emitted. Non-optional tables are always on."""
        if table in self.side_tables():
            return getattr(self, table)
        return True
