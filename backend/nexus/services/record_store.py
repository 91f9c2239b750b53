# Overview: Keyed-collection persistence behind every repository and the transaction processor.

"""
Record Store

Every collection (users, clients, providers, products, sales, purchases) is
one JSON array stored under a namespaced key ("nexus_products", ...). There
is no row-level write: save() replaces the whole collection, so two saves of
the same collection without a reload in between are last-writer-wins.

INVARIANTS:
- load() seeds a collection exactly once: the first read of a missing key
  writes the seed rows and returns them.
- Rows handed out by load() never alias stored state; mutating them has no
  effect until save().
- Stored text that does not decode to the expected shape raises
  CorruptStateError instead of being replaced or ignored.

ATOMICITY:
- RecordStore.save_many() is the three-phase design: one independent save
  per collection, in the order given, no rollback. A failure part-way leaves
  the earlier collections written and the later ones untouched.
- SqlRecordStore.save_many() stages every collection and commits once, so a
  failed commit leaves all of them as they were.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterable

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..models import StoredCollection
from .concurrency import run_with_retry


logger = logging.getLogger(__name__)

USERS = "users"
CLIENTS = "clients"
PROVIDERS = "providers"
PRODUCTS = "products"
SALES = "sales"
PURCHASES = "purchases"
CURRENT_USER = "current_user"

COLLECTIONS = (USERS, CLIENTS, PROVIDERS, PRODUCTS, SALES, PURCHASES)

Seed = Iterable[dict] | Callable[[], Iterable[dict]]


class CorruptStateError(Exception):
    """Raised when a stored collection or record cannot be deserialized."""
    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored state under {key!r} is corrupt: {reason}")
        self.key = key
        self.reason = reason


class StorageError(Exception):
    """Raised when the backend fails to persist a write."""


def _json_dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class RecordStore:
    """
    Base store: collection/record semantics over three backend primitives
    (_read, _write, _remove) that subclasses provide.
    """

    def __init__(self, namespace: str = "nexus"):
        self.namespace = namespace

    def key_for(self, name: str) -> str:
        return f"{self.namespace}_{name}"

    # Backend primitives

    def _read(self, key: str) -> str | None:
        raise NotImplementedError

    def _write(self, key: str, text: str) -> None:
        raise NotImplementedError

    def _remove(self, key: str) -> None:
        raise NotImplementedError

    # Collections

    def _decode(self, key: str, text: str) -> Any:
        try:
            return json.loads(text)
        except (TypeError, ValueError) as exc:
            raise CorruptStateError(key, str(exc)) from exc

    def _decode_rows(self, key: str, text: str) -> list[dict]:
        rows = self._decode(key, text)
        if not isinstance(rows, list):
            raise CorruptStateError(key, f"expected a JSON array, found {type(rows).__name__}")
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise CorruptStateError(key, f"row {index} is not a JSON object")
        return rows

    def load(self, name: str, seed: Seed = ()) -> list[dict]:
        """Return the stored rows, writing and returning `seed` on first access."""
        key = self.key_for(name)
        text = self._read(key)
        if text is None:
            rows = list(seed() if callable(seed) else seed)
            text = _json_dumps(rows)
            self.save(name, rows)
            logger.info("Seeded collection %s with %d rows", key, len(rows))
        return self._decode_rows(key, text)

    def save(self, name: str, rows: list[dict]) -> None:
        self._write(self.key_for(name), _json_dumps(list(rows)))

    def save_many(self, updates: dict[str, list[dict]]) -> None:
        """
        Persist several collections with independent saves, in order.

        Not atomic: if the second save fails, the first has already landed.
        """
        for name, rows in updates.items():
            self.save(name, rows)

    def run_in_transaction(self, func: Callable[[], Any]) -> Any:
        """Run a load-modify-save cycle. Backends may retry it on conflicts."""
        return func()

    # Singleton records

    def get(self, name: str) -> Any:
        key = self.key_for(name)
        text = self._read(key)
        if text is None:
            return None
        return self._decode(key, text)

    def put(self, name: str, value: Any) -> None:
        self._write(self.key_for(name), _json_dumps(value))

    def delete(self, name: str) -> None:
        self._remove(self.key_for(name))

    def exists(self, name: str) -> bool:
        return self._read(self.key_for(name)) is not None


class MemoryRecordStore(RecordStore):
    """Process-local store. State is kept as serialized JSON text per key."""

    def __init__(self, namespace: str = "nexus", initial: dict[str, str] | None = None):
        super().__init__(namespace)
        self._data: dict[str, str] = dict(initial or {})

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, text: str) -> None:
        self._data[key] = text

    def _remove(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, name: str) -> str | None:
        """Stored text for a collection, for inspection."""
        return self._data.get(self.key_for(name))

    def corrupt(self, name: str, text: str) -> None:
        """Overwrite a collection's stored text verbatim (bypasses encoding)."""
        self._data[self.key_for(name)] = text


class SqlRecordStore(RecordStore):
    """
    Record store on the Flask-SQLAlchemy session: one StoredCollection row
    per key. Requires an application context.
    """

    def __init__(self, namespace: str = "nexus", *, attempts: int = 3, backoff_base: float = 0.1):
        super().__init__(namespace)
        self.attempts = attempts
        self.backoff_base = backoff_base

    def _read(self, key: str) -> str | None:
        row = db.session.get(StoredCollection, key)
        return row.payload if row is not None else None

    def _stage(self, key: str, text: str) -> None:
        row = db.session.get(StoredCollection, key)
        if row is None:
            db.session.add(StoredCollection(key=key, payload=text))
        else:
            row.payload = text

    def _apply(self, payloads: list[tuple[str, str]]) -> None:
        """Stage every payload and commit once; roll everything back on failure."""
        try:
            for key, text in payloads:
                self._stage(key, text)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            if isinstance(exc, (OperationalError, StaleDataError)):
                # run_in_transaction retries these
                raise
            raise StorageError(f"Failed to persist record store changes: {exc}") from exc

    def _write(self, key: str, text: str) -> None:
        self._apply([(key, text)])

    def _remove(self, key: str) -> None:
        row = db.session.get(StoredCollection, key)
        if row is None:
            return
        try:
            db.session.delete(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError(f"Failed to delete {key!r}: {exc}") from exc

    def save_many(self, updates: dict[str, list[dict]]) -> None:
        """Write every collection in one commit (all land or none do)."""
        payloads = [(self.key_for(name), _json_dumps(list(rows))) for name, rows in updates.items()]
        self._apply(payloads)

    def run_in_transaction(self, func: Callable[[], Any]) -> Any:
        try:
            return run_with_retry(func, attempts=self.attempts, backoff_base=self.backoff_base)
        except (OperationalError, StaleDataError) as exc:
            raise StorageError(f"Record store stayed busy after {self.attempts} attempts") from exc
