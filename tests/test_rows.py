"""Tests for header-keyed row normalization."""

from retail_ingest.etl.rows import build_rows, first_non_blank_row, header_labels


def test_header_labels_are_trimmed_and_blank_cells_dropped() -> None:
    assert header_labels([" Store UID* ", None, 0, "Region"]) == ["Store UID*", "", "", "Region"]


def test_build_rows_keys_values_by_label() -> None:
    grid = [
        ["Title"],
        ["Store UID*", None, "Region"],
        ["  S1 ", "ignored", " North"],
        ["S2"],
    ]
    rows = build_rows(grid, header_row=1)
    assert rows == [
        {"Store UID*": "S1", "Region": "North"},
        {"Store UID*": "S2", "Region": None},
    ]


def test_non_text_cells_pass_through() -> None:
    rows = build_rows([["Square"], [120.0]], header_row=0)
    assert rows[0]["Square"] == 120.0


def test_duplicate_label_keeps_rightmost_column() -> None:
    rows = build_rows([["Unit", "Unit"], ["pcs", "box"]], header_row=0)
    assert rows == [{"Unit": "box"}]


def test_explicit_data_start() -> None:
    grid = [["UID*"], [None], [None], ["X1"]]
    assert build_rows(grid, 0, data_start=3) == [{"UID*": "X1"}]


def test_first_non_blank_row() -> None:
    grid = [["UID*"], [None, "  "], [None, "X1"]]
    assert first_non_blank_row(grid, 1) == 2
    assert first_non_blank_row(grid, 3) is None
    assert first_non_blank_row([["a"], [None]], 1) is None
