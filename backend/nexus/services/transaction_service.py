# Overview: Transaction processor; applies sales and purchases across ledgers, stock and client totals.

"""
Transaction Processor

A sale or purchase is applied as one logical unit:
1. append the record to its ledger (sales or purchases)
2. adjust stock of every referenced product
3. adjust derived aggregates (client totalSpent for sales, product cost
   for purchases)

INVARIANTS:
- Ledgers are append-only. A record id already in the ledger is rejected
  (DuplicateTransactionError), so a retried call never double-applies.
- Every check runs before any write: an unknown product or client, or an
  oversell, aborts the whole operation with nothing persisted.
- Purchase cost is last-price-wins: cost = costPrice of the last line for
  that product, never an average.
- All affected collections are written through one save_many() call.
  Whether that is atomic is the store's property (see record_store).

Legacy mode (reject_duplicates=False, strict_references=False,
allow_negative_stock=True) reproduces the pre-validation behaviour, where unknown
references are skipped and a replayed id is applied again.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from ..models import Purchase, Sale
from ..validation import coerce_money, money_to_json
from .record_store import CLIENTS, PRODUCTS, PURCHASES, SALES, RecordStore
from .repositories import ClientRepository, LedgerRepository, ProductRepository


logger = logging.getLogger(__name__)


class TransactionError(Exception):
    """Raised when a sale or purchase cannot be applied."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class UnknownProductError(TransactionError):
    """Raised when a line references a product that does not exist."""


class UnknownClientError(TransactionError):
    """Raised when a sale references a client that does not exist."""


class DuplicateTransactionError(TransactionError):
    """Raised when a sale or purchase id is already in its ledger."""


class InsufficientStockError(TransactionError):
    """Raised when a sale would take a product's stock below zero."""


def _index_by_id(rows: list[dict]) -> dict[str, dict]:
    return {row.get("id"): row for row in rows}


class TransactionProcessor:
    def __init__(
        self,
        store: RecordStore,
        *,
        products: ProductRepository,
        clients: ClientRepository,
        sales: LedgerRepository,
        purchases: LedgerRepository,
        reject_duplicates: bool = True,
        strict_references: bool = True,
        allow_negative_stock: bool = False,
    ):
        self.store = store
        self.products = products
        self.clients = clients
        self.sales = sales
        self.purchases = purchases
        self.reject_duplicates = reject_duplicates
        self.strict_references = strict_references
        self.allow_negative_stock = allow_negative_stock

    def _check_duplicate(self, ledger_rows: list[dict], record_id: str, kind: str) -> None:
        if not self.reject_duplicates:
            return
        if any(row.get("id") == record_id for row in ledger_rows):
            raise DuplicateTransactionError(
                f"{kind} {record_id} has already been applied",
                details={"id": record_id},
            )

    def _resolve_products(self, items, products_by_id: dict[str, dict], kind: str, record_id: str) -> list:
        """Pair each line with its product row; None marks a skipped line."""
        resolved = []
        missing = []
        for item in items:
            product = products_by_id.get(item.product_id)
            if product is None:
                missing.append(item.product_id)
            resolved.append((item, product))

        if missing:
            if self.strict_references:
                raise UnknownProductError(
                    f"{kind} {record_id} references unknown products",
                    details={"product_ids": missing},
                )
            logger.warning("%s %s: skipping lines for unknown products %s", kind, record_id, missing)
        return resolved

    def _validate_on_hand(self, resolved: list) -> None:
        requested: dict[str, int] = defaultdict(int)
        stock: dict[str, int] = {}
        for item, product in resolved:
            if product is not None:
                requested[item.product_id] += item.quantity
                stock[item.product_id] = int(product.get("stock") or 0)

        insufficient = []
        for product_id, qty in requested.items():
            on_hand = stock[product_id]
            if on_hand < qty:
                insufficient.append({
                    "product_id": product_id,
                    "requested_quantity": qty,
                    "on_hand": on_hand,
                })

        if insufficient:
            raise InsufficientStockError(
                "Insufficient stock to complete sale",
                details={"items": insufficient},
            )

    def complete_sale(self, sale: Sale) -> Sale:
        """
        Record a sale: append it to the sales ledger, decrement stock for
        every line, and add the sale total to the client's totalSpent.
        """
        def _op():
            sales = self.sales.rows()
            products = self.products.rows()
            clients = self.clients.rows()

            self._check_duplicate(sales, sale.id, "Sale")
            resolved = self._resolve_products(sale.items, _index_by_id(products), "Sale", sale.id)

            client = _index_by_id(clients).get(sale.client_id)
            if client is None:
                if self.strict_references:
                    raise UnknownClientError(
                        f"Sale {sale.id} references unknown client {sale.client_id}",
                        details={"client_id": sale.client_id},
                    )
                logger.warning("Sale %s: client %s not found, totalSpent not updated", sale.id, sale.client_id)

            if not self.allow_negative_stock:
                self._validate_on_hand(resolved)

            sales.append(sale.to_dict())
            for item, product in resolved:
                if product is not None:
                    product["stock"] = int(product.get("stock") or 0) - item.quantity
            if client is not None:
                spent = coerce_money(
                    client.get("totalSpent") or 0, "totalSpent", allow_negative=True, maximum=None,
                )
                client["totalSpent"] = money_to_json(spent + sale.total)

            self.store.save_many({SALES: sales, PRODUCTS: products, CLIENTS: clients})
            return sale

        result = self.store.run_in_transaction(_op)
        logger.info(
            "Sale %s completed: %d lines, total %s, client %s",
            sale.id, len(sale.items), sale.total, sale.client_id,
        )
        return result

    def complete_purchase(self, purchase: Purchase) -> Purchase:
        """
        Record a purchase: append it to the purchases ledger, increment
        stock for every line and overwrite each product's cost with the
        line's costPrice.
        """
        def _op():
            purchases = self.purchases.rows()
            products = self.products.rows()

            self._check_duplicate(purchases, purchase.id, "Purchase")
            resolved = self._resolve_products(purchase.items, _index_by_id(products), "Purchase", purchase.id)

            purchases.append(purchase.to_dict())
            for item, product in resolved:
                if product is not None:
                    product["stock"] = int(product.get("stock") or 0) + item.quantity
                    product["cost"] = money_to_json(item.cost_price)

            self.store.save_many({PURCHASES: purchases, PRODUCTS: products})
            return purchase

        result = self.store.run_in_transaction(_op)
        logger.info(
            "Purchase %s completed: %d lines, total %s, provider %s",
            purchase.id, len(purchase.items), purchase.total, purchase.provider_id,
        )
        return result
