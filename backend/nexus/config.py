# backend/nexus/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/nexus.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///nexus.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Prefix for every collection key ("nexus_products", "nexus_sales", ...)
    STORE_NAMESPACE = os.environ.get("NEXUS_NAMESPACE", "nexus")

    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    IMPORT_DEFAULT_MIN_STOCK = int(os.environ.get("IMPORT_DEFAULT_MIN_STOCK", "5"))

    # Transaction policy. Turning all three the other way reproduces the
    # legacy behaviour (unknown references skipped, no stock floor).
    LEDGER_REJECT_DUPLICATES = _env_flag("LEDGER_REJECT_DUPLICATES", True)
    STRICT_REFERENCES = _env_flag("STRICT_REFERENCES", True)
    ALLOW_NEGATIVE_STOCK = _env_flag("ALLOW_NEGATIVE_STOCK", False)
