"""Helpers shared by the entity extractors."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.cleaning_utils import as_uid, cell_text, is_blank, is_truthy
from retail_ingest.types import Table


def make_table(name: str, columns: tuple[str, ...], records: Iterable[Mapping[str, Any]]) -> Table:
    return Table(name=name, columns=columns, records=tuple(dict(r) for r in records))


def side_table(
    name: str,
    columns: tuple[str, ...],
    records: Iterable[Mapping[str, Any]],
    options: CsvGenerationOptions,
) -> Optional[Table]:
    """Build a side table, or None when it is disabled or empty."""
    if not options.is_enabled(name):
        return None
    table = make_table(name, columns, records)
    return table if len(table) else None


def uid_or_name(uid: Any, name: Any) -> Any:
    """Prefer a non-blank identifier, else a non-blank display name, else None."""
    if not is_blank(uid):
        return uid
    if not is_blank(name):
        return name
    return None


def main_unit_uid(item_uid: str, main_unit: Any, unit_name: Any) -> Any:
    """Resolve the item's main unit id, deriving one when the column is blank.

    Examples:
        >>> main_unit_uid("X1", None, "pcs")
        'X1_pcs'
        >>> main_unit_uid("X1", "", None)
        'X1_01'

    """
    if not is_blank(main_unit):
        return main_unit
    if is_truthy(unit_name) and cell_text(unit_name).strip():
        return f"{item_uid}_{cell_text(unit_name).strip()}"
    return f"{item_uid}_01"


def dedup_key(value: Any) -> str:
    """Stringified identity used to key dedup maps."""
    return as_uid(value) or ""
