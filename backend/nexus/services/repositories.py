# Overview: Typed CRUD over record store collections, one repository per entity kind.

"""
Entity Repositories

Each repository maps one collection of the record store to a domain type.

- list(): load (seeding on first access) and convert every row.
- upsert(e): replace the row with e.id, or append; idempotent by id.
- delete(id): drop the row with that id; unknown ids are a no-op.

Rows that fail to convert raise CorruptStateError: a row the domain types
reject is stored state we cannot trust, not bad user input.
"""

from __future__ import annotations

import dataclasses
from typing import Callable, Generic, Iterable, TypeVar

from ..models import (
    Client,
    Product,
    Provider,
    Purchase,
    Sale,
    User,
    WALK_IN_CLIENT_ID,
)
from ..seed_data import INITIAL_CLIENTS, INITIAL_PRODUCTS, INITIAL_PROVIDERS, INITIAL_USERS
from ..validation import ConflictError, ValidationError
from .record_store import (
    CLIENTS,
    PRODUCTS,
    PROVIDERS,
    PURCHASES,
    SALES,
    USERS,
    CorruptStateError,
    RecordStore,
)


T = TypeVar("T")


class Repository(Generic[T]):
    """Generic list/get/upsert/delete repository over one collection."""

    def __init__(self, store: RecordStore, name: str, model: type[T], seed=()):
        self.store = store
        self.name = name
        self.model = model
        self.seed = seed

    def rows(self) -> list[dict]:
        """Stored rows as plain dicts (seeding on first access)."""
        return self.store.load(self.name, self.seed)

    def _to_model(self, row: dict) -> T:
        try:
            return self.model.from_dict(row)
        except (ValidationError, AttributeError, TypeError) as exc:
            raise CorruptStateError(self.store.key_for(self.name), f"row {row.get('id')!r}: {exc}") from exc

    def list(self) -> list[T]:
        return [self._to_model(row) for row in self.rows()]

    def get(self, record_id: str) -> T | None:
        for row in self.rows():
            if row.get("id") == record_id:
                return self._to_model(row)
        return None

    def _check_upsert(self, entity: T, rows: list[dict]) -> None:
        """Hook for per-entity uniqueness rules."""

    def upsert(self, entity: T) -> T:
        return self.upsert_many([entity])[0]

    def upsert_many(self, entities: Iterable[T]) -> list[T]:
        """
        Upsert several records with a single load and a single save.

        Each entity is rebuilt through its constructor first, so fields
        reassigned after construction are validated again (ValidationError)
        before anything is written. The rebuilt records are returned.
        """
        entities = [dataclasses.replace(entity) for entity in entities]
        rows = self.rows()
        positions = {row.get("id"): idx for idx, row in enumerate(rows)}
        for entity in entities:
            self._check_upsert(entity, rows)
            data = entity.to_dict()
            idx = positions.get(entity.id)
            if idx is None:
                positions[entity.id] = len(rows)
                rows.append(data)
            else:
                rows[idx] = data
        self.store.save(self.name, rows)
        return entities

    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False (and writes nothing) if it did not exist."""
        rows = self.rows()
        kept = [row for row in rows if row.get("id") != record_id]
        if len(kept) == len(rows):
            return False
        self.store.save(self.name, kept)
        return True


class UserRepository(Repository[User]):
    def __init__(self, store: RecordStore, hash_password: Callable[[str], str]):
        super().__init__(store, USERS, User, seed=self._seed)
        self.hash_password = hash_password

    def _seed(self) -> list[dict]:
        rows = []
        for fixture in INITIAL_USERS:
            row = {k: v for k, v in fixture.items() if k != "password"}
            row["passwordHash"] = self.hash_password(fixture["password"])
            rows.append(row)
        return rows

    def _check_upsert(self, entity: User, rows: list[dict]) -> None:
        for row in rows:
            if row.get("username") == entity.username and row.get("id") != entity.id:
                raise ConflictError(f"Username {entity.username!r} is already taken")

    def upsert(self, entity: User) -> User:
        # Forms do not carry credentials; keep the stored hash when editing.
        if not entity.has_credential:
            existing = self.get(entity.id)
            if existing is not None:
                entity.password_hash = existing.password_hash
                entity.legacy_password = existing.legacy_password
        return super().upsert(entity)

    def find_by_username(self, username: str) -> User | None:
        for user in self.list():
            if user.username == username:
                return user
        return None

    def set_password(self, user_id: str, password: str) -> User:
        user = self.get(user_id)
        if user is None:
            raise ValidationError(f"User {user_id} not found")
        if not password:
            raise ValidationError("password is required")
        user.password_hash = self.hash_password(password)
        user.legacy_password = None
        return super().upsert(user)


class ClientRepository(Repository[Client]):
    def __init__(self, store: RecordStore):
        super().__init__(store, CLIENTS, Client, seed=INITIAL_CLIENTS)

    def delete(self, record_id: str) -> bool:
        if record_id == WALK_IN_CLIENT_ID:
            raise ConflictError("The walk-in client cannot be deleted")
        return super().delete(record_id)

    def walk_in(self) -> Client | None:
        return self.get(WALK_IN_CLIENT_ID)


class ProviderRepository(Repository[Provider]):
    def __init__(self, store: RecordStore):
        super().__init__(store, PROVIDERS, Provider, seed=INITIAL_PROVIDERS)


class ProductRepository(Repository[Product]):
    def __init__(self, store: RecordStore):
        super().__init__(store, PRODUCTS, Product, seed=INITIAL_PRODUCTS)

    def low_stock(self) -> list[Product]:
        """Products at or below their reorder threshold, lowest stock first."""
        products = [p for p in self.list() if p.is_low_stock]
        return sorted(products, key=lambda p: (p.stock, p.name))

    def find_by_code(self, code: str) -> list[Product]:
        return [p for p in self.list() if p.code == code]


class LedgerRepository(Repository[T]):
    """
    Read side of an append-only ledger. Writes go through the transaction
    processor, which also maintains stock and client aggregates.
    """

    def upsert(self, entity: T) -> T:
        raise ConflictError(f"{self.name} records are immutable; use the transaction processor")

    def upsert_many(self, entities: Iterable[T]) -> list[T]:
        raise ConflictError(f"{self.name} records are immutable; use the transaction processor")

    def delete(self, record_id: str) -> bool:
        raise ConflictError(f"{self.name} records cannot be deleted")


def sales_ledger(store: RecordStore) -> LedgerRepository[Sale]:
    return LedgerRepository(store, SALES, Sale)


def purchases_ledger(store: RecordStore) -> LedgerRepository[Purchase]:
    return LedgerRepository(store, PURCHASES, Purchase)
