"""Tests for the stores and store-items extractors."""

import pytest

from retail_ingest.config import CsvGenerationOptions
from retail_ingest.etl.pipeline import convert_workbook
from retail_ingest.etl.staging import extract_store_items, extract_stores
from retail_ingest.workbook import Workbook

from conftest import STORES_HEADER, by_name


def test_stores_scenario(run_date) -> None:
    rows = [STORES_HEADER, ["S1", "Shop A", "North", "120", "1", ""]]
    wb = Workbook.from_rows({"Sheet1": rows})
    result = convert_workbook(wb, run_date)
    assert [f.name for f in result.csv_files] == ["stores_20250131.csv"]
    assert result.csv_files[0].content == (
        "store_uid,name,region,group_name,floor_space,in_shelf,licence_start_date,is_deleted\n"
        "S1,Shop A,North,,120,1,2023-01-01,0\n"
    )


def test_store_without_uid_is_dropped() -> None:
    rows = [{"Store UID*": None, "Store name*": "Ghost"}, {"Store UID*": 7, "Store name*": "B"}]
    (stores,) = extract_stores(rows)
    assert [r["store_uid"] for r in stores.records] == ["7"]


def test_store_integer_fields_default_to_zero() -> None:
    (stores,) = extract_stores([{"Store UID*": "S1", "Square": "big", "To delete": 1}])
    rec = stores.records[0]
    assert rec["floor_space"] == 0
    assert rec["in_shelf"] == 0
    assert rec["is_deleted"] == 1
    assert rec["licence_start_date"] == "2023-01-01"


def test_no_valid_stores_yields_no_tables() -> None:
    assert extract_stores([{"Store UID*": ""}, {}]) == []


def _item_row(**overrides):
    row = {
        "Store UID*": "S1",
        "Product UID*": "P1",
        "In assortment?": "1",
        "Purchase price": "12,50",
        "Sale price": "",
        "Supplier UID": "SUP1",
        "Supplier": "Acme",
    }
    row.update(overrides)
    return row


def test_store_items_prices_and_flags() -> None:
    tables = by_name(extract_store_items([_item_row(**{"In assortment?": "yes"})]))
    item = tables["items"].records[0]
    assert item["purchase_price"] == pytest.approx(12.5)
    assert item["retail_price"] is None
    assert item["is_active_planogram"] == 0
    assert item["external_supplier_uid"] == "SUP1"


def test_store_items_require_both_ids() -> None:
    rows = [_item_row(**{"Store UID*": None}), _item_row(**{"Product UID*": ""}), _item_row()]
    tables = by_name(extract_store_items(rows))
    assert len(tables["items"]) == 1


def test_suppliers_deduplicated_first_wins() -> None:
    rows = [
        _item_row(),
        _item_row(**{"Product UID*": "P2", "Supplier": "Acme Renamed"}),
        _item_row(**{"Supplier UID": None, "Supplier": "No id"}),
    ]
    tables = by_name(extract_store_items(rows))
    assert len(tables["items"]) == 3
    assert list(tables["suppliers"].records) == [
        {"supplier_uid": "SUP1", "name": "Acme", "is_deleted": 0}
    ]
    assert tables["items"].records[2]["external_supplier_uid"] is None


def test_suppliers_can_be_disabled() -> None:
    options = CsvGenerationOptions(suppliers=False)
    tables = extract_store_items([_item_row()], options)
    assert [t.name for t in tables] == ["items"]


def test_store_items_without_valid_rows() -> None:
    assert extract_store_items([_item_row(**{"Store UID*": None})]) == []
