# Overview: Dashboard figures computed from the ledgers and the catalog.

from __future__ import annotations

from decimal import Decimal

from ..models import Product
from ..validation import money_to_json


def _product_row(product: Product) -> dict:
    return {
        "id": product.id,
        "code": product.code,
        "name": product.name,
        "stock": product.stock,
        "minStock": product.min_stock,
    }


def dashboard_summary(backoffice, *, low_stock_limit: int = 5) -> dict:
    """
    Headline numbers for the dashboard.

    low_stock lists at most low_stock_limit products, lowest stock first
    (ties by name) rather than in catalog order; low_stock_count is the full count.
    """
    sales = backoffice.sales.list()
    purchases = backoffice.purchases.list()
    products = backoffice.products.list()
    low_stock = sorted((p for p in products if p.is_low_stock), key=lambda p: (p.stock, p.name))

    total_sales = sum((s.total for s in sales), Decimal("0"))
    total_purchases = sum((p.total for p in purchases), Decimal("0"))

    return {
        "total_sales_value": money_to_json(total_sales),
        "sales_count": len(sales),
        "total_purchases_value": money_to_json(total_purchases),
        "purchases_count": len(purchases),
        "product_count": len(products),
        "client_count": len(backoffice.clients.list()),
        "low_stock_count": len(low_stock),
        "low_stock": [_product_row(p) for p in low_stock[:low_stock_limit]],
    }


def recent_sales(backoffice, limit: int = 10) -> list[dict]:
    """Newest sales first."""
    sales = sorted(backoffice.sales.list(), key=lambda s: s.date, reverse=True)
    return [s.to_dict() for s in sales[:limit]]
