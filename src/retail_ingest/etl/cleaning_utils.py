"""Shared utilities for cleaning spreadsheet cell values.

This module provides the small, forgiving converters every extractor uses
to turn raw cells into output field values. None of them raise on bad
input: a value that cannot be interpreted resolves to a caller-chosen
default instead.

Key utilities:
- Cell normalization: missing-value detection, trimming, truthiness
- Identity handling: render any cell as an opaque uid string
- Number parsing: leading-prefix integer/decimal parsing, comma decimals
- Date parsing: native dates, spreadsheet serial numbers, free text

Examples:
    >>> from retail_ingest.etl.cleaning_utils import parse_decimal, parse_int, to_date
    >>> parse_decimal("12,50")
    12.5
    >>> parse_int("120 m2")
    120
    >>> to_date(45000)
    datetime.date(2023, 3, 15)
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

import numpy as np
import pandas as pd

from retail_ingest.config import EXCEL_EPOCH_OFFSET_DAYS

UNIX_EPOCH = date(1970, 1, 1)

# Leading integer / decimal prefix, the way spreadsheet exports are read by hand
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%d-%m-%Y")


def is_missing(x: Any) -> bool:
    """True for None, NaN and NaT."""
    if x is None:
        return True
    if isinstance(x, float) and math.isnan(x):
        return True
    return x is pd.NaT


def clean_cell(x: Any) -> Any:
    """Convert a raw reader value into a plain Python cell value.

    NaN/NaT become None, pandas timestamps become ``datetime`` and numpy
    scalars become their Python equivalents.

    Examples:
        >>> clean_cell(float("nan")) is None
        True
        >>> clean_cell(np.int64(3))
        3

    """
    if is_missing(x):
        return None
    if isinstance(x, pd.Timestamp):
        return x.to_pydatetime()
    if isinstance(x, np.generic):
        return x.item()
    return x


def trim_cell(x: Any) -> Any:
    """Strip surrounding whitespace from strings; pass other values through."""
    return x.strip() if isinstance(x, str) else x


def is_blank(x: Any) -> bool:
    """True when the value is missing or renders as an empty string."""
    return is_missing(x) or cell_text(x).strip() == ""


def is_truthy(x: Any) -> bool:
    """Loose truthiness used for "is this column populated" checks.

    Missing values, empty strings, zero and NaN are all falsy.

    Examples:
        >>> is_truthy("0")
        True
        >>> is_truthy(0)
        False

    """
    if is_missing(x):
        return False
    if isinstance(x, str):
        return x != ""
    if isinstance(x, (int, float)):
        return x != 0
    return True


def format_number(x: float | int) -> str:
    """Render a number in plain decimal form; integral floats lose their ``.0``.

    Examples:
        >>> format_number(120.0)
        '120'
        >>> format_number(12.5)
        '12.5'

    """
    if isinstance(x, bool):
        return "true" if x else "false"
    if isinstance(x, float):
        if math.isnan(x):
            return "NaN"
        if math.isinf(x):
            return "Infinity" if x > 0 else "-Infinity"
        if x.is_integer() and abs(x) < 1e21:
            return str(int(x))
    return str(x)


def cell_text(x: Any) -> str:
    """Render any cell value as text. Missing values render as ''."""
    if is_missing(x):
        return ""
    if isinstance(x, str):
        return x
    if isinstance(x, (int, float)):
        return format_number(x)
    if isinstance(x, (date, datetime)):
        return x.isoformat()
    return str(x)


def as_uid(x: Any) -> Optional[str]:
    """Render an identity cell as an opaque string, or None when missing.

    Numeric cells keep their digits only (``1001.0`` -> ``"1001"``).
    """
    if is_missing(x):
        return None
    return cell_text(x)


def parse_int(x: Any, default: int = 0) -> int:
    """Parse the leading base-10 integer of a value.

    Zero and unparseable input both resolve to ``default``.

    Examples:
        >>> parse_int("12.9")
        12
        >>> parse_int("abc")
        0
        >>> parse_int(None)
        0

    """
    if is_missing(x):
        return default
    m = _INT_PREFIX_RE.match(cell_text(x))
    if not m:
        return default
    value = int(m.group(1))
    return value or default


def parse_decimal(x: Any, default: Optional[float] = None) -> Optional[float]:
    """Parse a locale-flexible decimal.

    The first comma is treated as the decimal separator, then the leading
    numeric prefix is read. Zero and unparseable input both resolve to
    ``default``; price and measure fields rely on that to emit null rather
    than 0.

    Examples:
        >>> parse_decimal("12,50")
        12.5
        >>> parse_decimal("") is None
        True
        >>> parse_decimal("n/a", default=0)
        0

    """
    if is_missing(x) or isinstance(x, bool):
        return default
    if isinstance(x, (int, float)):
        value = float(x)
    else:
        m = _FLOAT_PREFIX_RE.match(cell_text(x).replace(",", ".", 1))
        if not m:
            return default
        try:
            value = float(m.group(1))
        except ValueError:
            return default
    if math.isnan(value) or value == 0:
        return default
    return value


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Convert a spreadsheet serial day number to a calendar date.

    The time-of-day fraction is discarded; the conversion is done in pure
    calendar arithmetic, so the result never depends on the local timezone.

    Examples:
        >>> excel_serial_to_date(45000)
        datetime.date(2023, 3, 15)
        >>> excel_serial_to_date(25569.75)
        datetime.date(1970, 1, 1)

    """
    try:
        return UNIX_EPOCH + timedelta(days=math.floor(serial - EXCEL_EPOCH_OFFSET_DAYS))
    except (OverflowError, ValueError):
        return None


def to_date(val: Any) -> Optional[date]:
    """Resolve a cell to a calendar date.

    Tries, in order:
    1. An already-typed date/datetime value
    2. A spreadsheet serial number (numbers greater than 1)
    3. Free-text parsing: ISO, MM/DD/YYYY, DD/MM/YYYY, DD-MM-YYYY, then pandas

    Args:
        val: Raw cell value.

    Returns:
        The resolved date, or None when every path fails.

    """
    if not is_truthy(val):
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return excel_serial_to_date(val) if val > 1 else None
    if not isinstance(val, str):
        return None
    s = val.strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    try:
        parsed = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed.date()


def format_date(d: date) -> str:
    """Format a date as YYYY-MM-DD."""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def format_run_date(d: date) -> str:
    """Format a run date for file names: YYYYMMDD."""
    return f"{d.year:04d}{d.month:02d}{d.day:02d}"
