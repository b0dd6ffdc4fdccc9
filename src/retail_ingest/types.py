"""Shared types for the conversion pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class FileType(str, Enum):
    """Upstream spreadsheet formats recognized by the type detector."""

    ITEM_MASTER = "ITEM_MASTER"
    ITEM_MASTER_V2 = "ITEM_MASTER_V2"
    FACTS = "FACTS"
    STORE_ITEMS = "STORE_ITEMS"
    STORE = "STORE"
    STOCK = "STOCK"
    PRICE = "PRICE"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        """Human-readable name, e.g. "Item Master (New Format)"."""
        return _FILE_TYPE_LABELS.get(self, self.value.replace("_", " ").title())


_FILE_TYPE_LABELS = {
    FileType.UNKNOWN: "Unknown",
    FileType.ITEM_MASTER_V2: "Item Master (New Format)",
    FileType.FACTS: "Facts Data",
    FileType.STORE_ITEMS: "Store Items",
    FileType.STORE: "Stores",
}


@dataclass(frozen=True)
class StatusUpdate:
    """One status event emitted while a file moves through the pipeline.

    Attributes:
        message: Human-readable description of the transition.
        status: One of "processing", "success" or "error".

    """

    message: str
    status: str


class StatusCallback(Protocol):
    """Sink for status events. Purely observational."""

    def __call__(self, update: StatusUpdate) -> None: ...


@dataclass(frozen=True)
class Table:
    """An entity collection with its authoritative column order.

    Attributes:
        name: Output table name, e.g. "masteritems".
        columns: Ordered output columns.
        records: One flat mapping per row; only ``columns`` are ever read.

    """

    name: str
    columns: tuple[str, ...]
    records: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class CsvFile:
    """A serialized table ready to be written into an archive."""

    name: str
    content: str


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one workbook."""

    csv_files: tuple[CsvFile, ...]
    detected_type: FileType
    sheet_name: str | None = None
