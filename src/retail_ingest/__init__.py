"""retail_ingest - classify retail spreadsheet exports and normalize them to CSV.

Upstream retail systems export stores, assortments, daily facts and product
masters as irregular spreadsheets. This package detects which template a
workbook follows, locates its header row, extracts canonical entities and
serializes them as fixed-column CSV tables:

- **Stores** -> ``stores``
- **Store items** -> ``items``, ``suppliers``
- **Facts** -> ``facts``
- **Item master (v1 and v2)** -> ``masteritems``, ``barcodes``, ``brands``,
  ``dimensions``, ``erpcategories``, ``manufacturers``

Module Structure:
    retail_ingest.workbook: Spreadsheet reader adapter (Workbook)
    retail_ingest.etl.detection: File type detection and header location
    retail_ingest.etl.rows: Cell normalizer
    retail_ingest.etl.staging: One entity extractor per file type
    retail_ingest.etl.serialize: CSV serializer and column orders
    retail_ingest.etl.pipeline: Per-file dispatcher
    retail_ingest.batch: Multi-file runs and the ZIP archive

Quick Start:
    >>> from datetime import date
    >>> from retail_ingest import convert_file
    >>>
    >>> result = convert_file("exports/Stores.xlsx", run_date=date(2025, 1, 31))
    >>> result.detected_type
    <FileType.STORE: 'STORE'>
    >>> [f.name for f in result.csv_files]
    ['stores_20250131.csv']
"""

__version__ = "0.1.0"

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.pipeline import convert_file, convert_workbook
from retail_ingest.exceptions import (
    ArchiveError,
    ConfigError,
    ConversionError,
    RetailIngestError,
    UnknownFormatError,
)
from retail_ingest.types import ConversionResult, CsvFile, FileType, StatusUpdate
from retail_ingest.workbook import Workbook, read_workbook

__all__ = [
    "ArchiveError",
    "ConfigError",
    "ConversionError",
    "ConversionResult",
    "CsvFile",
    "CsvGenerationOptions",
    "FileType",
    "RetailIngestError",
    "StatusUpdate",
    "UnknownFormatError",
    "Workbook",
    "__version__",
    "convert_file",
    "convert_workbook",
    "read_workbook",
]
