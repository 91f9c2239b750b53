from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from nexus.validation import (
    ValidationError,
    coerce_int,
    coerce_money,
    money_to_json,
    optional_text,
    quantize_money,
    require_text,
)
from .base import coerce_datetime, datetime_to_json, new_record_id


@dataclass
class Product:
    """
    Catalog product with its on-hand quantity.

    price is the sale price; cost is the unit cost of the most recent
    purchase (overwritten by every purchase, never averaged).
    stock is not floored here; the transaction processor owns that policy.
    """
    id: str
    code: str
    name: str
    price: Decimal = Decimal("0")
    cost: Decimal = Decimal("0")
    stock: int = 0
    min_stock: int = 0
    description: str = ""
    category_id: str = "general"
    image_url: str | None = None

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.code = optional_text(self.code) or ""
        self.name = require_text(self.name, "name")
        self.price = coerce_money(self.price, "price")
        self.cost = coerce_money(self.cost, "cost")
        self.stock = coerce_int(self.stock, "stock")
        self.min_stock = coerce_int(self.min_stock, "minStock")
        self.description = optional_text(self.description) or ""
        self.category_id = optional_text(self.category_id) or "general"
        self.image_url = optional_text(self.image_url)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "price": money_to_json(self.price),
            "cost": money_to_json(self.cost),
            "stock": self.stock,
            "minStock": self.min_stock,
            "categoryId": self.category_id,
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=data.get("id"),
            code=data.get("code") or "",
            name=data.get("name"),
            price=data.get("price") or 0,
            cost=data.get("cost") or 0,
            stock=data.get("stock") or 0,
            min_stock=data.get("minStock") or 0,
            description=data.get("description") or "",
            category_id=data.get("categoryId") or "general",
            image_url=data.get("imageUrl"),
        )


@dataclass
class Provider:
    id: str
    name: str
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    category: str = ""
    image_url: str | None = None

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.name = require_text(self.name, "name")
        self.contact_name = optional_text(self.contact_name) or ""
        self.email = optional_text(self.email) or ""
        self.phone = optional_text(self.phone) or ""
        self.category = optional_text(self.category) or ""
        self.image_url = optional_text(self.image_url)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "contactName": self.contact_name,
            "email": self.email,
            "phone": self.phone,
            "category": self.category,
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Provider":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            contact_name=data.get("contactName") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            category=data.get("category") or "",
            image_url=data.get("imageUrl"),
        )


@dataclass
class PurchaseItem:
    product_id: str
    product_name: str
    quantity: int
    cost_price: Decimal
    subtotal: Decimal | None = None

    def __post_init__(self) -> None:
        self.product_id = require_text(self.product_id, "productId")
        self.product_name = optional_text(self.product_name) or ""
        self.quantity = coerce_int(self.quantity, "quantity")
        if self.quantity <= 0:
            raise ValidationError("quantity must be greater than zero")
        self.cost_price = coerce_money(self.cost_price, "costPrice")

        expected = quantize_money(self.cost_price * self.quantity)
        if self.subtotal is None:
            self.subtotal = expected
        else:
            self.subtotal = coerce_money(self.subtotal, "subtotal", maximum=None)
            if self.subtotal != expected:
                raise ValidationError(
                    f"subtotal {self.subtotal} does not equal quantity x costPrice ({expected})"
                )

    @classmethod
    def for_product(cls, product: Product, quantity: int, cost_price=None) -> "PurchaseItem":
        """Line for a product, defaulting the unit cost to its last known cost."""
        return cls(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            cost_price=product.cost if cost_price is None else cost_price,
        )

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "costPrice": money_to_json(self.cost_price),
            "subtotal": money_to_json(self.subtotal),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PurchaseItem":
        return cls(
            product_id=data.get("productId"),
            product_name=data.get("productName") or "",
            quantity=data.get("quantity"),
            cost_price=data.get("costPrice"),
            subtotal=data.get("subtotal"),
        )


@dataclass
class Purchase:
    """
    Stock receipt from a provider. Immutable once completed.

    total must equal the sum of the line subtotals; when omitted it is
    computed from the lines.
    """
    id: str
    provider_id: str
    items: list[PurchaseItem]
    provider_name: str = ""
    reference: str | None = None
    date: datetime | None = None
    total: Decimal | None = None

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.provider_id = require_text(self.provider_id, "providerId")
        self.provider_name = optional_text(self.provider_name) or ""
        self.reference = optional_text(self.reference)
        self.date = coerce_datetime(self.date)

        if not self.items:
            raise ValidationError("A purchase needs at least one item")
        self.items = [
            item if isinstance(item, PurchaseItem) else PurchaseItem.from_dict(item)
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
        provider,
        items: list[PurchaseItem],
        reference: str | None = None,
        purchase_id: str | None = None,
        date: datetime | None = None,
    ) -> "Purchase":
        return cls(
            id=purchase_id or new_record_id("pur"),
            provider_id=provider.id,
            provider_name=provider.name,
            items=items,
            reference=reference,
            date=date,
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "date": datetime_to_json(self.date),
            "providerId": self.provider_id,
            "providerName": self.provider_name,
            "items": [item.to_dict() for item in self.items],
            "total": money_to_json(self.total),
        }
        if self.reference:
            data["reference"] = self.reference
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Purchase":
        return cls(
            id=data.get("id"),
            provider_id=data.get("providerId"),
            provider_name=data.get("providerName") or "",
            items=list(data.get("items") or []),
            reference=data.get("reference"),
            date=data.get("date"),
            total=data.get("total"),
        )
