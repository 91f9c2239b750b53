# backend/nexus/__init__.py
from flask import Flask

from .config import Config
from .extensions import db


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        # Applied before extensions bind so the engine sees the test database
        app.config.update(test_config)

    # Initialize extensions
    db.init_app(app)

    # Import models so metadata.create_all() sees the record store table
    from . import models  # noqa: F401

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
