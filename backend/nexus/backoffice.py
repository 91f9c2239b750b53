# Overview: Wires repositories, session gate, transaction processor and importer over one record store.

from __future__ import annotations

from functools import partial

from flask import current_app

from .config import Config
from .services.auth_service import SessionGate, hash_password
from .services.import_service import BulkImporter, ImportReport
from .services.record_store import RecordStore, SqlRecordStore
from .services.repositories import (
    ClientRepository,
    ProductRepository,
    ProviderRepository,
    UserRepository,
    purchases_ledger,
    sales_ledger,
)
from .services.transaction_service import TransactionProcessor


def _setting(settings, name: str):
    if settings is None:
        return getattr(Config, name)
    if isinstance(settings, dict):
        return settings.get(name, getattr(Config, name))
    return getattr(settings, name, getattr(Config, name))


class Backoffice:
    """
    Every core operation the UI layer calls, bound to one record store.

    settings may be a Flask config, a plain dict or None (class defaults);
    only the keys documented in Config are read.
    """

    def __init__(self, store: RecordStore, settings=None):
        self.store = store
        rounds = int(_setting(settings, "BCRYPT_ROUNDS"))

        self.users = UserRepository(store, partial(hash_password, rounds=rounds))
        self.clients = ClientRepository(store)
        self.providers = ProviderRepository(store)
        self.products = ProductRepository(store)
        self.sales = sales_ledger(store)
        self.purchases = purchases_ledger(store)

        self.session = SessionGate(store, self.users, bcrypt_rounds=rounds)
        self.transactions = TransactionProcessor(
            store,
            products=self.products,
            clients=self.clients,
            sales=self.sales,
            purchases=self.purchases,
            reject_duplicates=bool(_setting(settings, "LEDGER_REJECT_DUPLICATES")),
            strict_references=bool(_setting(settings, "STRICT_REFERENCES")),
            allow_negative_stock=bool(_setting(settings, "ALLOW_NEGATIVE_STOCK")),
        )
        self.importer = BulkImporter(
            self.products,
            default_min_stock=int(_setting(settings, "IMPORT_DEFAULT_MIN_STOCK")),
        )

    # Shorthands matching the calls the UI layer makes

    def login(self, username: str, password: str | None = None):
        return self.session.login(username, password)

    def logout(self) -> None:
        self.session.logout()

    def current_user(self):
        return self.session.current_user()

    def complete_sale(self, sale):
        return self.transactions.complete_sale(sale)

    def complete_purchase(self, purchase):
        return self.transactions.complete_purchase(purchase)

    def import_products_from_text(self, text: str) -> ImportReport:
        return self.importer.import_products_from_text(text)

    def seed_all(self) -> None:
        """Force first-access seeding of every collection."""
        for repo in (self.users, self.clients, self.providers, self.products, self.sales, self.purchases):
            repo.rows()


def get_backoffice() -> Backoffice:
    """Backoffice over the SQL record store of the current Flask app."""
    config = current_app.config
    return Backoffice(SqlRecordStore(config["STORE_NAMESPACE"]), config)
