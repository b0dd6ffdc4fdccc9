"""Tests for CSV rendering of canonical tables."""

import io
from datetime import date

import pandas as pd

from retail_ingest.etl.serialize import (
    MASTERITEMS_V2_COLUMNS,
    STORES_COLUMNS,
    csv_file_name,
    serialize_table,
    serialize_tables,
    to_csv_text,
)
from retail_ingest.types import Table


def test_header_and_column_order_come_from_columns() -> None:
    text = to_csv_text([{"b": 2, "a": 1, "extra": "x"}], ["a", "b"])
    assert text == "a,b\n1,2\n"


def test_nulls_render_empty() -> None:
    text = to_csv_text([{"a": None}, {"b": float("nan")}], ["a", "b"])
    assert text == "a,b\n,\n,\n"


def test_numbers_keep_plain_decimal_form() -> None:
    text = to_csv_text([{"a": 120.0, "b": 12.5, "c": 0.1}], ["a", "b", "c"])
    assert text.splitlines()[1] == "120,12.5,0.1"


def test_quoting_of_commas_and_quotes() -> None:
    text = to_csv_text([{"name": 'Big "Shop", North', "region": "East"}], ["name", "region"])
    assert text == 'name,region\n"Big ""Shop"", North",East\n'


def test_csv_reads_back_with_pandas() -> None:
    records = [{"store_uid": "S1", "name": "A, B", "region": None, "floor_space": 120}]
    text = to_csv_text(records, STORES_COLUMNS)
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    assert list(df.columns) == list(STORES_COLUMNS)
    assert df.loc[0, "name"] == "A, B"
    assert df.loc[0, "region"] == ""
    assert df.loc[0, "floor_space"] == "120"


def test_masteritems_v2_column_count() -> None:
    assert len(MASTERITEMS_V2_COLUMNS) == 28
    assert MASTERITEMS_V2_COLUMNS[-1] == "is_deleted"


def test_file_names_embed_run_date() -> None:
    assert csv_file_name("facts", date(2025, 1, 31)) == "facts_20250131.csv"


def test_serialize_tables_skips_empty_tables(run_date) -> None:
    stores = Table("stores", ("store_uid",), ({"store_uid": "S1"},))
    empty = Table("brands", ("brand_uid",), ())
    files = serialize_tables([stores, empty], run_date)
    assert [f.name for f in files] == ["stores_20250131.csv"]
    assert files[0] == serialize_table(stores, run_date)
    assert files[0].content == "store_uid\nS1\n"


def test_quotes_inside_a_field_are_doubled() -> None:
    text = to_csv_text([{"a": 1, "b": 'say "hi", x'}], ["a", "b"])
    assert text == 'a,b\n1,"say ""hi"", x"\n'


def test_line_breaks_are_quoted() -> None:
    text = to_csv_text([{"a": "x\ny", "b": 1}], ["a", "b"])
    assert text == 'a,b\n"x\ny",1\n'
    df = pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)
    assert df.loc[0, "a"] == "x\ny"
