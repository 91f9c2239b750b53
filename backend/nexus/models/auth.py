from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from nexus.validation import ValidationError, coerce_enum, optional_text, require_text


class Role(str, Enum):
    ADMIN = "ADMIN"
    SELLER = "SELLER"
    WAREHOUSE = "WAREHOUSE"


@dataclass
class User:
    """
    Back-office user account.

    Credentials: password_hash holds a bcrypt hash. legacy_password is only
    ever populated from stored state written before hashing existed; the
    session gate upgrades it to a hash the first time it verifies.
    Neither field is part of to_dict(include_credentials=False), which is
    what the current-session record stores.
    """
    id: str
    username: str
    name: str = ""
    email: str = ""
    role: Role = Role.SELLER
    is_active: bool = True
    image_url: str | None = None
    password_hash: str | None = field(default=None, repr=False)
    legacy_password: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.id = require_text(self.id, "id")
        self.username = require_text(self.username, "username")
        self.name = optional_text(self.name) or ""
        self.email = optional_text(self.email) or ""
        self.role = coerce_enum(Role, self.role, "role")
        if not isinstance(self.is_active, bool):
            raise ValidationError("isActive must be a boolean")
        self.image_url = optional_text(self.image_url)
        self.password_hash = optional_text(self.password_hash)
        self.legacy_password = self.legacy_password or None

    @property
    def has_credential(self) -> bool:
        return bool(self.password_hash or self.legacy_password)

    def to_dict(self, include_credentials: bool = True) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "username": self.username,
            "role": self.role.value,
            "isActive": self.is_active,
        }
        if self.image_url:
            data["imageUrl"] = self.image_url
        if include_credentials:
            if self.password_hash:
                data["passwordHash"] = self.password_hash
            if self.legacy_password:
                data["password"] = self.legacy_password
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "User":
        return cls(
            id=data.get("id"),
            username=data.get("username"),
            name=data.get("name") or "",
            email=data.get("email") or "",
            role=data.get("role") or Role.SELLER,
            is_active=bool(data.get("isActive", True)),
            image_url=data.get("imageUrl"),
            password_hash=data.get("passwordHash"),
            legacy_password=data.get("password"),
        )
