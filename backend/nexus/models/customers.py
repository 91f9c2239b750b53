from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from nexus.validation import coerce_money, money_to_json, optional_text, require_text


# The anonymous walk-in buyer. Sales without a named client are booked here.
WALK_IN_CLIENT_ID = "cf"


@dataclass
class Client:
    """
    Client master data.

    total_spent is a denormalized aggregate maintained by the transaction
    processor when sales are completed; forms should carry it through
    unchanged when editing a client.
    """
    id: str
    name: str
    tax_id: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    total_spent: Decimal = Decimal("0")
    image_url: str | None = None

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.name = require_text(self.name, "name")
        self.tax_id = optional_text(self.tax_id) or ""
        self.email = optional_text(self.email) or ""
        self.phone = optional_text(self.phone) or ""
        self.address = optional_text(self.address) or ""
        self.total_spent = coerce_money(self.total_spent, "totalSpent", maximum=None)
        self.image_url = optional_text(self.image_url)

    @property
    def is_walk_in(self) -> bool:
        return self.id == WALK_IN_CLIENT_ID

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "taxId": self.tax_id,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "totalSpent": money_to_json(self.total_spent),
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Client":
        return cls(
            id=data.get("id"),
            name=data.get("name"),
            tax_id=data.get("taxId") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            address=data.get("address") or "",
            total_spent=data.get("totalSpent") or 0,
            image_url=data.get("imageUrl"),
        )
