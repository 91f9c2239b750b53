"""
Bulk importer tests.

Delimiter detection, quoting, decimal comma, per-row validation and the
empty-file signal. Bad rows are skipped and counted, never fatal.
"""

import pytest

from nexus.services.import_service import (
    IMPORTED_CATEGORY,
    IMPORTED_DESCRIPTION,
    EmptyImportFile,
    detect_delimiter,
)


MIXED_FILE = (
    "code,name,price,cost,stock,minStock\n"
    "SKU-1,Widget,10.5,5,100,10\n"
    "BAD,row,x,y\n"
    "SKU-2,Gadget,20,,50,5"
)


def _imported(backoffice):
    return [p for p in backoffice.products.list() if p.id.startswith("p-csv-")]


def test_invalid_rows_do_not_abort_valid_rows(backoffice):
    report = backoffice.import_products_from_text(MIXED_FILE)

    assert report.imported_count == 1
    assert report.error_count == 2
    assert [e.line_number for e in report.errors] == [3, 4]

    products = _imported(backoffice)
    assert len(products) == 1
    widget = products[0]
    assert widget.code == "SKU-1"
    assert str(widget.price) == "10.50"
    assert widget.cost == 5
    assert widget.stock == 100
    assert widget.min_stock == 10
    assert widget.description == IMPORTED_DESCRIPTION
    assert widget.category_id == IMPORTED_CATEGORY


def test_imported_products_are_appended_after_existing(backoffice):
    backoffice.import_products_from_text(MIXED_FILE)

    ids = [p.id for p in backoffice.products.list()]
    assert ids[:4] == ["p1", "p2", "p3", "p4"]
    assert len(ids) == 5


def test_semicolon_file_with_decimal_comma(backoffice):
    text = "code;name;price;cost;stock;minStock\nSKU-9;Tornillo;10,5;2,25;30;4\n"

    report = backoffice.import_products_from_text(text)

    assert report.imported_count == 1
    product = report.products[0]
    assert str(product.price) == "10.50"
    assert str(product.cost) == "2.25"


def test_quoted_fields_lose_quotes(backoffice):
    text = 'code,name,price,cost,stock,minStock\n"SKU-3","Cable, 2m",3,1,7,2\n\'SKU-4\',Plug,1,1,1,1\n'

    report = backoffice.import_products_from_text(text)

    assert report.error_count == 0
    assert [(p.code, p.name) for p in report.products] == [("SKU-3", "Cable, 2m"), ("SKU-4", "Plug")]


def test_unparsable_min_stock_defaults(backoffice):
    text = "code,name,price,cost,stock,minStock\nA,Alpha,1,1,1,\nB,Beta,1,1,1,lots\n"

    report = backoffice.import_products_from_text(text)

    assert [p.min_stock for p in report.products] == [5, 5]


def test_default_min_stock_is_configurable(store):
    from nexus.backoffice import Backoffice

    backoffice = Backoffice(store, {"BCRYPT_ROUNDS": 4, "IMPORT_DEFAULT_MIN_STOCK": 12})
    report = backoffice.import_products_from_text("h\nA,Alpha,1,1,1,?\n")

    assert report.products[0].min_stock == 12


@pytest.mark.parametrize("row", [
    "N,Negative price,-1,1,1,1",
    "N,Negative cost,1,-0.5,1,1",
    "N,Negative stock,1,1,-3,1",
    "N,Fractional stock,1,1,2.5,1",
    "N,Text stock,1,1,many,1",
    "N,,1,1,1,1",
    "N,Too few,1,1,1",
])
def test_rejected_rows(backoffice, row):
    report = backoffice.import_products_from_text("code,name,price,cost,stock,minStock\n" + row)

    assert report.imported_count == 0
    assert report.error_count == 1
    assert report.errors[0].raw == row


def test_extra_columns_are_ignored(backoffice):
    report = backoffice.import_products_from_text("h\nX,Extra,1,1,1,1,ignored,also\n")
    assert report.imported_count == 1


def test_blank_lines_are_skipped(backoffice):
    report = backoffice.import_products_from_text("h\n\nA,Alpha,1,1,1,1\n   \nB,Beta,2,1,1,1\n")

    assert report.imported_count == 2
    assert report.error_count == 0


@pytest.mark.parametrize("text", ["", "   \n\n", "code,name,price,cost,stock,minStock\n"])
def test_empty_file_signal(backoffice, text):
    with pytest.raises(EmptyImportFile, match="empty or malformed"):
        backoffice.import_products_from_text(text)


def test_all_rows_invalid_writes_nothing(backoffice, store):
    backoffice.seed_all()
    before = store.raw("products")

    report = backoffice.import_products_from_text("h\nbad\nworse,row\n")

    assert report.imported_count == 0
    assert report.error_count == 2
    assert store.raw("products") == before


def test_reimport_creates_duplicates(backoffice):
    backoffice.import_products_from_text(MIXED_FILE)
    backoffice.import_products_from_text(MIXED_FILE)

    widgets = backoffice.products.find_by_code("SKU-1")
    assert len(widgets) == 2
    assert widgets[0].id != widgets[1].id


def test_report_summary_and_dict(backoffice):
    report = backoffice.import_products_from_text(MIXED_FILE)

    assert report.summary() == "Import completed: 1 products imported, 2 rows skipped."
    data = report.to_dict()
    assert data["importedCount"] == 1
    assert data["errorCount"] == 2
    assert data["errors"][0]["line"] == 3


def test_detect_delimiter():
    assert detect_delimiter("a;b;c") == ";"
    assert detect_delimiter("a,b,c") == ","
    assert detect_delimiter("a;b,c") == ";"
