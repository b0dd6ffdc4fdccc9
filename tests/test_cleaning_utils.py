"""Tests for cell cleaning, number parsing and date resolution."""

import time
from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from retail_ingest.etl.cleaning_utils import (
    as_uid,
    cell_text,
    clean_cell,
    excel_serial_to_date,
    format_date,
    format_number,
    format_run_date,
    is_blank,
    is_truthy,
    parse_decimal,
    parse_int,
    to_date,
)


def test_clean_cell_converts_reader_values() -> None:
    assert clean_cell(np.nan) is None
    assert clean_cell(pd.NaT) is None
    assert clean_cell(np.int64(7)) == 7
    assert isinstance(clean_cell(np.int64(7)), int)
    ts = clean_cell(pd.Timestamp("2024-05-01 10:30"))
    assert isinstance(ts, datetime) and not isinstance(ts, pd.Timestamp)


def test_blank_and_truthy() -> None:
    assert is_blank(None) and is_blank("   ") and is_blank(float("nan"))
    assert not is_blank(0)
    assert not is_truthy(0) and not is_truthy("") and not is_truthy(None)
    assert is_truthy("0") and is_truthy(-1) and is_truthy(date(2024, 1, 1))


def test_uids_are_opaque_strings() -> None:
    """Numeric identity cells render without a trailing .0."""
    assert as_uid(1001) == "1001"
    assert as_uid(1001.0) == "1001"
    assert as_uid("007") == "007"
    assert as_uid(None) is None


def test_format_number() -> None:
    assert format_number(120.0) == "120"
    assert format_number(12.5) == "12.5"
    assert format_number(-3) == "-3"
    assert cell_text(0.1) == "0.1"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("120", 120),
        ("12.9", 12),
        ("  7 m2", 7),
        ("-4", -4),
        (3.7, 3),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("0", 0),
    ],
)
def test_parse_int(raw, expected) -> None:
    assert parse_int(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12,50", 12.5),
        ("12.50", 12.5),
        (" 3,2 kg", 3.2),
        ("1e2", 100.0),
        (".5", 0.5),
        (7, 7.0),
        ("", None),
        (None, None),
        ("0", None),
        ("0,00", None),
        ("n/a", None),
    ],
)
def test_parse_decimal_defaults_to_null(raw, expected) -> None:
    """Zero and failures are null for price-like fields."""
    assert parse_decimal(raw) == expected


def test_parse_decimal_with_zero_default() -> None:
    assert parse_decimal("", default=0) == 0
    assert parse_decimal("abc", default=0) == 0
    assert parse_decimal("4,5", default=0) == 4.5


def test_only_first_comma_is_a_decimal_separator() -> None:
    assert parse_decimal("1,234,5") == 1.234


def test_excel_serial_to_date() -> None:
    assert excel_serial_to_date(25569) == date(1970, 1, 1)
    assert excel_serial_to_date(45000) == date(2023, 3, 15)
    assert excel_serial_to_date(45000.99) == date(2023, 3, 15)
    assert excel_serial_to_date(1e12) is None


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="tzset not available")
@pytest.mark.parametrize("tz", ["UTC", "Pacific/Kiritimati", "America/Los_Angeles"])
def test_serial_date_is_timezone_independent(monkeypatch, tz) -> None:
    monkeypatch.setenv("TZ", tz)
    time.tzset()
    try:
        assert to_date(45000) == date(2023, 3, 15)
    finally:
        monkeypatch.undo()
        time.tzset()


def test_to_date_resolution_order() -> None:
    assert to_date(datetime(2024, 2, 29, 23, 59)) == date(2024, 2, 29)
    assert to_date(date(2024, 2, 29)) == date(2024, 2, 29)
    assert to_date(45000) == date(2023, 3, 15)
    assert to_date("2024-02-29") == date(2024, 2, 29)
    assert to_date("03/04/2023") == date(2023, 3, 4)
    assert to_date("15/03/2023") == date(2023, 3, 15)


@pytest.mark.parametrize("raw", [None, "", 0, 1, 0.5, "not a date", True])
def test_to_date_failures_are_null(raw) -> None:
    assert to_date(raw) is None


def test_date_formats() -> None:
    assert format_date(date(2023, 3, 5)) == "2023-03-05"
    assert format_run_date(date(2023, 3, 5)) == "20230305"
