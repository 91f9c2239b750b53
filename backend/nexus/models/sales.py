from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from nexus.validation import (
    ValidationError,
    coerce_enum,
    coerce_int,
    coerce_money,
    money_to_json,
    optional_text,
    quantize_money,
    require_text,
)
from .base import coerce_datetime, datetime_to_json, new_record_id
from .inventory import Product


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"


@dataclass
class SaleItem:
    """
    Sale line. product_name and unit_price are snapshots taken when the
    line was added so history does not change when the catalog does.
    """
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal | None = None

    def __post_init__(self) -> None:
        self.product_id = require_text(self.product_id, "productId")
        self.product_name = optional_text(self.product_name) or ""
        self.quantity = coerce_int(self.quantity, "quantity")
        if self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")
        self.unit_price = coerce_money(self.unit_price, "unitPrice")

        expected = quantize_money(self.unit_price * self.quantity)
        if self.subtotal is None:
            self.subtotal = expected
        else:
            self.subtotal = coerce_money(self.subtotal, "subtotal", maximum=None)
            if self.subtotal != expected:
                raise ValidationError(
                    f"subtotal {self.subtotal} does not equal quantity x unitPrice ({expected})"
                )

    @classmethod
    def for_product(cls, product: Product, quantity: int) -> "SaleItem":
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=product.price,
        )

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": money_to_json(self.unit_price),
            "subtotal": money_to_json(self.subtotal),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return cls(
            product_id=data.get("productId"),
            product_name=data.get("productName") or "",
            quantity=data.get("quantity"),
            unit_price=data.get("unitPrice"),
            subtotal=data.get("subtotal"),
        )


@dataclass
class Sale:
    """
    Completed sale. Immutable once handed to the transaction processor.

    total must equal the sum of the line subtotals; when omitted it is
    computed from the lines.
    """
    id: str
    client_id: str
    seller_id: str
    items: list[SaleItem]
    payment_method: PaymentMethod = PaymentMethod.CASH
    client_name: str = ""
    date: datetime | None = None
    total: Decimal | None = None

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.client_id = require_text(self.client_id, "clientId")
        self.seller_id = require_text(self.seller_id, "sellerId")
        self.client_name = optional_text(self.client_name) or ""
        self.payment_method = coerce_enum(PaymentMethod, self.payment_method, "paymentMethod")
        self.date = coerce_datetime(self.date)

        if not self.items:
            raise ValidationError("A sale needs at least one item")
        self.items = [
            item if isinstance(item, SaleItem) else SaleItem.from_dict(item)
            for item in self.items
        ]

        expected = quantize_money(sum((item.subtotal for item in self.items), Decimal("0")))
        if self.total is None:
            self.total = expected
        else:
            self.total = coerce_money(self.total, "total", maximum=None)
            if self.total != expected:
                raise ValidationError(
                    f"total {self.total} does not equal the sum of item subtotals ({expected})"
                )

    @classmethod
    def build(
        cls,
        *,
        client,
        seller_id: str,
        lines: list[tuple[Product, int]],
        payment_method: PaymentMethod | str = PaymentMethod.CASH,
        sale_id: str | None = None,
        date: datetime | None = None,
    ) -> "Sale":
        """Assemble a sale from (product, quantity) pairs, snapshotting prices."""
        return cls(
            id=sale_id or new_record_id("sale"),
            client_id=client.id,
            client_name=client.name,
            seller_id=seller_id,
            items=[SaleItem.for_product(product, quantity) for product, quantity in lines],
            payment_method=payment_method,
            date=date,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": datetime_to_json(self.date),
            "clientId": self.client_id,
            "clientName": self.client_name,
            "sellerId": self.seller_id,
            "items": [item.to_dict() for item in self.items],
            "total": money_to_json(self.total),
            "paymentMethod": self.payment_method.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        return cls(
            id=data.get("id"),
            client_id=data.get("clientId"),
            client_name=data.get("clientName") or "",
            seller_id=data.get("sellerId"),
            items=list(data.get("items") or []),
            payment_method=data.get("paymentMethod") or PaymentMethod.CASH,
            date=data.get("date"),
            total=data.get("total"),
        )
