"""
Pytest fixtures for the nexus back-office tests.

Provides in-memory record stores, Backoffice instances in strict and legacy
policy modes, and a Flask app bound to an in-memory SQLite database.
"""

import pytest

from nexus import create_app
from nexus.backoffice import Backoffice
from nexus.extensions import db
from nexus.models import StoredCollection
from nexus.services.record_store import MemoryRecordStore, SqlRecordStore


# bcrypt's minimum cost factor keeps the suite fast
FAST_SETTINGS = {"BCRYPT_ROUNDS": 4}

LEGACY_SETTINGS = {
    "BCRYPT_ROUNDS": 4,
    "LEDGER_REJECT_DUPLICATES": False,
    "STRICT_REFERENCES": False,
    "ALLOW_NEGATIVE_STOCK": True,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty record store table for each test."""
    with app.app_context():
        db.session.query(StoredCollection).delete()
        db.session.commit()

        yield db.session

        db.session.rollback()


@pytest.fixture(scope='function')
def store():
    return MemoryRecordStore()


@pytest.fixture(scope='function')
def backoffice(store):
    """Backoffice with the default (strict) transaction policy."""
    return Backoffice(store, FAST_SETTINGS)


@pytest.fixture(scope='function')
def legacy_backoffice():
    """Backoffice reproducing the lenient legacy transaction policy."""
    return Backoffice(MemoryRecordStore(), LEGACY_SETTINGS)


@pytest.fixture(scope='function')
def sql_backoffice(app, db_session):
    return Backoffice(SqlRecordStore(app.config["STORE_NAMESPACE"]), app.config)


@pytest.fixture(scope='function')
def products(backoffice):
    """Seeded catalog keyed by id."""
    return {p.id: p for p in backoffice.products.list()}


@pytest.fixture(scope='function')
def clients(backoffice):
    return {c.id: c for c in backoffice.clients.list()}
