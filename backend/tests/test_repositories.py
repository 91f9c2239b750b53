"""
Repository tests: seeding, upsert/delete semantics, per-entity rules and
corrupt-row detection.
"""

import json
from decimal import Decimal

import pytest

from nexus.models import Client, Product, Provider, Role, User, WALK_IN_CLIENT_ID
from nexus.services.record_store import PRODUCTS, USERS, CorruptStateError
from nexus.validation import ConflictError, ValidationError


class TestSeeding:
    def test_first_list_returns_fixtures(self, backoffice):
        assert [p.id for p in backoffice.products.list()] == ["p1", "p2", "p3", "p4"]
        assert [c.id for c in backoffice.clients.list()] == ["cf", "c1", "c2"]
        assert [p.id for p in backoffice.providers.list()] == ["pr1", "pr2"]
        assert [u.username for u in backoffice.users.list()] == ["admin", "juan", "maria"]
        assert backoffice.sales.list() == []
        assert backoffice.purchases.list() == []

    def test_seeded_users_store_hashes_not_plaintext(self, backoffice, store):
        backoffice.users.list()
        rows = json.loads(store.raw(USERS))

        for row in rows:
            assert "password" not in row
            assert row["passwordHash"].startswith("$2")

    def test_seeded_money_is_decimal(self, backoffice):
        p1 = backoffice.products.get("p1")
        assert str(p1.price) == "1200.00"
        assert p1.min_stock == 5


class TestUpsert:
    def test_upsert_new_appends(self, backoffice):
        product = Product(id="p9", code="NEW-9", name="Cable", price="9.90", cost="4.50", stock=10, min_stock=2)
        backoffice.products.upsert(product)

        ids = [p.id for p in backoffice.products.list()]
        assert ids[-1] == "p9"
        assert len(ids) == 5

    def test_upsert_existing_replaces_in_place(self, backoffice):
        p2 = backoffice.products.get("p2")
        p2.price = p2.price + 10
        backoffice.products.upsert(p2)

        products = backoffice.products.list()
        assert [p.id for p in products] == ["p1", "p2", "p3", "p4"]
        assert str(products[1].price) == "360.00"

    def test_upsert_twice_is_idempotent(self, backoffice):
        provider = Provider(id="pr3", name="Acme")
        backoffice.providers.upsert(provider)
        backoffice.providers.upsert(provider)

        assert [p.id for p in backoffice.providers.list()].count("pr3") == 1

    def test_upsert_many_single_save(self, backoffice, store):
        backoffice.products.list()
        saves = []
        original_save = store.save

        def counting_save(name, rows):
            saves.append(name)
            original_save(name, rows)

        store.save = counting_save
        backoffice.products.upsert_many([
            Product(id="a", code="A", name="A"),
            Product(id="b", code="B", name="B"),
        ])

        assert saves == [PRODUCTS]

    def test_reassigned_plain_numbers_are_revalidated(self, backoffice):
        c1 = backoffice.clients.get("c1")
        c1.total_spent = 9_999_000

        saved = backoffice.clients.upsert(c1)

        assert saved.total_spent == Decimal("9999000.00")
        assert backoffice.clients.get("c1").total_spent == 9_999_000

    def test_reassigned_invalid_value_rejected_before_write(self, backoffice, store):
        backoffice.seed_all()
        before = store.raw(PRODUCTS)
        p3 = backoffice.products.get("p3")
        p3.price = "abc"

        with pytest.raises(ValidationError, match="price"):
            backoffice.products.upsert(p3)
        assert store.raw(PRODUCTS) == before

    def test_get_unknown_returns_none(self, backoffice):
        assert backoffice.products.get("missing") is None


class TestDelete:
    def test_delete_removes_row(self, backoffice):
        assert backoffice.products.delete("p3") is True
        assert backoffice.products.get("p3") is None

    def test_delete_unknown_is_noop(self, backoffice):
        assert backoffice.products.delete("nope") is False
        assert len(backoffice.products.list()) == 4

    def test_walk_in_client_cannot_be_deleted(self, backoffice):
        with pytest.raises(ConflictError):
            backoffice.clients.delete(WALK_IN_CLIENT_ID)
        assert backoffice.clients.walk_in() is not None

    def test_other_clients_can_be_deleted(self, backoffice):
        assert backoffice.clients.delete("c2") is True
        assert [c.id for c in backoffice.clients.list()] == ["cf", "c1"]


class TestLedgers:
    def test_ledger_upsert_rejected(self, backoffice):
        with pytest.raises(ConflictError):
            backoffice.sales.upsert(object())

    def test_ledger_delete_rejected(self, backoffice):
        with pytest.raises(ConflictError):
            backoffice.purchases.delete("pur-1")


class TestUsers:
    def test_duplicate_username_rejected(self, backoffice):
        with pytest.raises(ConflictError):
            backoffice.users.upsert(User(id="9", username="admin", role=Role.SELLER))

    def test_edit_without_credential_keeps_hash(self, backoffice):
        before = backoffice.users.get("2")
        edited = User(id="2", username="juan", name="Juan V.", role=Role.SELLER)
        backoffice.users.upsert(edited)

        after = backoffice.users.get("2")
        assert after.name == "Juan V."
        assert after.password_hash == before.password_hash

    def test_set_password_requires_value(self, backoffice):
        with pytest.raises(ValidationError):
            backoffice.users.set_password("1", "")

    def test_set_password_unknown_user(self, backoffice):
        with pytest.raises(ValidationError):
            backoffice.users.set_password("404", "secret")

    def test_find_by_username(self, backoffice):
        assert backoffice.users.find_by_username("maria").role is Role.WAREHOUSE
        assert backoffice.users.find_by_username("ghost") is None


class TestProducts:
    def test_low_stock_sorted_by_stock(self, backoffice):
        assert [p.id for p in backoffice.products.low_stock()] == ["p4", "p2"]

    def test_low_stock_includes_threshold(self, backoffice):
        backoffice.products.upsert(Product(id="p5", code="E", name="Edge", stock=5, min_stock=5))
        assert "p5" in [p.id for p in backoffice.products.low_stock()]

    def test_find_by_code(self, backoffice):
        assert [p.id for p in backoffice.products.find_by_code("PROD-003")] == ["p3"]


class TestCorruptRows:
    def test_row_missing_required_field(self, backoffice, store):
        store.corrupt(PRODUCTS, json.dumps([{"id": "p1", "code": "X"}]))

        with pytest.raises(CorruptStateError, match="p1"):
            backoffice.products.list()

    def test_row_with_bad_money(self, backoffice, store):
        store.corrupt("clients", json.dumps([{"id": "c1", "name": "A", "totalSpent": "lots"}]))

        with pytest.raises(CorruptStateError):
            backoffice.clients.get("c1")

    def test_client_round_trip_keeps_fields(self, backoffice):
        client = Client(id="c9", name="Nueva", tax_id="1-2", total_spent="12.50")
        backoffice.clients.upsert(client)

        stored = backoffice.clients.get("c9")
        assert stored == client
