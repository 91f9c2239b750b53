# Overview: Bulk product import from CSV (or semicolon-delimited) spreadsheet exports.

"""
Bulk Importer

Input: text whose first line is a header (ignored) and whose remaining lines
are positional rows: code, name, price, cost, stock, minStock.

- Delimiter: ';' if the header line contains one, else ','.
- Quoted fields ("..." or '...') lose their quotes; double-quoted fields
  may contain the delimiter.
- price and cost accept a decimal comma ("10,5" == 10.5).
- A row is imported only with >= 6 columns, a non-negative price and cost,
  and a non-negative whole stock. An unparsable minStock falls back to the
  configured default (5).
- Bad rows are skipped and reported; they never abort the batch.
- Stock must already be a whole number: "2.5" is rejected rather than
  truncated to 2, and negative price, cost or stock are rejected rather
  than imported.
- Every accepted row becomes a NEW product (fresh id). Rows are not matched
  to existing products by code, so importing a file twice duplicates it.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from ..models import Product
from ..models.base import new_record_id
from .repositories import ProductRepository


logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = ("code", "name", "price", "cost", "stock", "minStock")
IMPORTED_DESCRIPTION = "Importado masivamente"
IMPORTED_CATEGORY = "general"


class EmptyImportFile(ValueError):
    """Raised when the input has no data rows (fewer than two non-blank lines)."""
    def __init__(self, message: str = "The file appears empty or malformed"):
        super().__init__(message)


@dataclass(frozen=True)
class MalformedImportRow:
    """A row that failed validation; line_number is 1-based in the input text."""
    line_number: int
    reason: str
    raw: str


@dataclass
class ImportReport:
    imported_count: int = 0
    error_count: int = 0
    errors: list[MalformedImportRow] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)

    def summary(self) -> str:
        message = f"Import completed: {self.imported_count} products imported"
        if self.error_count:
            message += f", {self.error_count} rows skipped"
        return message + "."

    def to_dict(self) -> dict:
        return {
            "importedCount": self.imported_count,
            "errorCount": self.error_count,
            "errors": [
                {"line": e.line_number, "reason": e.reason, "raw": e.raw}
                for e in self.errors
            ],
        }


class RowError(ValueError):
    """Internal: a single row failed validation."""


def _strip_quotes(value: str) -> str:
    text = value.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text


def _parse_decimal(value: str, field_name: str) -> Decimal:
    text = value.replace(",", ".")
    if not text:
        raise RowError(f"{field_name} is empty")
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise RowError(f"{field_name} is not a number: {value!r}")
    if not number.is_finite():
        raise RowError(f"{field_name} is not a number: {value!r}")
    if number < 0:
        raise RowError(f"{field_name} cannot be negative")
    return number


def _parse_whole(value: str, field_name: str) -> int:
    number = _parse_decimal(value, field_name)
    if number != number.to_integral_value():
        raise RowError(f"{field_name} must be a whole number: {value!r}")
    return int(number)


def detect_delimiter(header: str) -> str:
    return ";" if ";" in header else ","


class BulkImporter:
    def __init__(self, products: ProductRepository, *, default_min_stock: int = 5):
        self.products = products
        self.default_min_stock = default_min_stock

    def _parse_row(self, columns: list[str]) -> Product:
        if len(columns) < len(EXPECTED_COLUMNS):
            raise RowError(f"expected {len(EXPECTED_COLUMNS)} columns, found {len(columns)}")

        code, name, price, cost, stock, min_stock = (_strip_quotes(c) for c in columns[:6])
        price_value = _parse_decimal(price, "price")
        cost_value = _parse_decimal(cost, "cost")
        stock_value = _parse_whole(stock, "stock")
        try:
            min_stock_value = _parse_whole(min_stock, "minStock")
        except RowError:
            min_stock_value = self.default_min_stock

        try:
            return Product(
                id=new_record_id("p-csv"),
                code=code,
                name=name,
                price=price_value,
                cost=cost_value,
                stock=stock_value,
                min_stock=min_stock_value,
                description=IMPORTED_DESCRIPTION,
                category_id=IMPORTED_CATEGORY,
            )
        except ValueError as exc:
            raise RowError(str(exc))

    def parse(self, text: str) -> ImportReport:
        """Validate every row without writing anything."""
        non_blank = [
            (number, line)
            for number, line in enumerate((text or "").splitlines(), start=1)
            if line.strip()
        ]
        if len(non_blank) < 2:
            raise EmptyImportFile()

        _, header = non_blank[0]
        delimiter = detect_delimiter(header)
        report = ImportReport()

        for number, line in non_blank[1:]:
            try:
                columns = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True))
                product = self._parse_row(columns)
            except (RowError, csv.Error) as exc:
                report.errors.append(MalformedImportRow(line_number=number, reason=str(exc), raw=line))
                continue
            report.products.append(product)

        report.imported_count = len(report.products)
        report.error_count = len(report.errors)
        return report

    def import_products_from_text(self, text: str) -> ImportReport:
        """Parse, then write every accepted row as a new product in one save."""
        report = self.parse(text)
        if report.products:
            self.products.upsert_many(report.products)
        logger.info(
            "Product import: %d imported, %d rows skipped",
            report.imported_count, report.error_count,
        )
        for error in report.errors:
            logger.debug("Skipped import line %d: %s", error.line_number, error.reason)
        return report
