# Overview: Flask CLI command groups for bootstrap, inspection, imports and reports.

# backend/nexus/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Use: python -m flask --app nexus <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask --app nexus system init
#   Create the record store table and seed every collection (idempotent).
# - python -m flask --app nexus system reset --yes
#   DEV/TEST only: delete every collection; the next read re-seeds it.
#
# Users:
# - python -m flask --app nexus users list
# - python -m flask --app nexus users set-password admin
#   Prompts for the new password (hidden, confirmed).
#
# Session:
# - python -m flask --app nexus auth login admin
# - python -m flask --app nexus auth whoami
# - python -m flask --app nexus auth logout
#
# Products:
# - python -m flask --app nexus products list
# - python -m flask --app nexus products low-stock
# - python -m flask --app nexus products import inventory.csv
#   Columns: code,name,price,cost,stock,minStock (header row required).
#
# Reports:
# - python -m flask --app nexus report summary

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .backoffice import get_backoffice
from .extensions import db
from .services import reporting_service
from .services.auth_service import InvalidCredentials
from .services.import_service import EmptyImportFile
from .services.record_store import COLLECTIONS, CURRENT_USER, CorruptStateError
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the back office: record store table plus seed fixtures.

    Creates:
    - Users: admin, juan, maria (password: "password")
    - Walk-in client "Consumidor Final" and two sample clients
    - Four sample products and two providers
    - Empty sales and purchases ledgers

    SECURITY: Change passwords immediately after first login!
    """
    click.echo("START Initializing record store...")
    db.create_all()

    backoffice = get_backoffice()
    try:
        backoffice.seed_all()
    except CorruptStateError as e:
        current_app.logger.exception("Failed to seed record store")
        click.echo(f"FAIL {e}")
        raise SystemExit(1)

    for name in COLLECTIONS:
        key = backoffice.store.key_for(name)
        count = len(backoffice.store.load(name))
        click.echo(f"PASS {key}: {count} rows")
    click.echo("DONE Record store ready")


@system_group.command('reset')
@click.option('--yes', is_flag=True, help='Confirm deleting all stored collections')
@with_appcontext
def reset_store(yes):
    """DEV/TEST only: delete every collection and the session record."""
    if not yes:
        click.echo("Refusing to reset without --yes")
        raise SystemExit(1)

    backoffice = get_backoffice()
    for name in COLLECTIONS + (CURRENT_USER,):
        backoffice.store.delete(name)
        click.echo(f"PASS Deleted {backoffice.store.key_for(name)}")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List users with role and active status."""
    for user in get_backoffice().users.list():
        status = "active" if user.is_active else "inactive"
        credential = "password" if user.has_credential else "no password"
        click.echo(f"{user.id:>6}  {user.username:<16} {user.role.value:<10} {status:<9} {credential}")


@users_group.command('set-password')
@click.argument('username')
@click.password_option()
@with_appcontext
def set_password_cli(username, password):
    """Store a new bcrypt-hashed password for USERNAME."""
    backoffice = get_backoffice()
    user = backoffice.users.find_by_username(username)
    if user is None:
        click.echo(f"FAIL User {username!r} not found")
        raise SystemExit(1)
    try:
        backoffice.users.set_password(user.id, password)
    except ValidationError as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    click.echo(f"PASS Password updated for {username}")


@click.group('auth')
def auth_group():
    """Session commands."""


@auth_group.command('login')
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True, default='', show_default=False)
@with_appcontext
def login_cli(username, password):
    """Open a session for USERNAME."""
    result = get_backoffice().login(username, password or None)
    if isinstance(result, InvalidCredentials):
        click.echo(f"FAIL {result.message}")
        raise SystemExit(1)
    click.echo(f"PASS Logged in as {result.name or result.username} ({result.role.value})")


@auth_group.command('logout')
@with_appcontext
def logout_cli():
    get_backoffice().logout()
    click.echo("PASS Logged out")


@auth_group.command('whoami')
@with_appcontext
def whoami_cli():
    user = get_backoffice().current_user()
    if user is None:
        click.echo("No active session")
        return
    click.echo(f"{user.username} ({user.role.value})")


@click.group('products')
def products_group():
    """Catalog commands."""


def _echo_products(products):
    for p in products:
        click.echo(f"{p.code:<12} {p.name[:32]:<32} stock={p.stock:<6} min={p.min_stock:<4} price={p.price} cost={p.cost}")


@products_group.command('list')
@with_appcontext
def list_products_cli():
    _echo_products(get_backoffice().products.list())


@products_group.command('low-stock')
@with_appcontext
def low_stock_cli():
    """Products at or below their reorder threshold."""
    products = get_backoffice().products.low_stock()
    if not products:
        click.echo("No products below minimum stock")
        return
    _echo_products(products)


@products_group.command('import')
@click.argument('csv_file', type=click.File('r', encoding='utf-8-sig'))
@click.option('--show-errors', is_flag=True, help='List every skipped row')
@with_appcontext
def import_products_cli(csv_file, show_errors):
    """Import products from a CSV file (code,name,price,cost,stock,minStock)."""
    try:
        report = get_backoffice().import_products_from_text(csv_file.read())
    except EmptyImportFile as e:
        click.echo(f"FAIL {e}")
        raise SystemExit(1)
    except Exception:
        current_app.logger.exception("Failed to import products")
        raise

    click.echo(report.summary())
    if show_errors:
        for error in report.errors:
            click.echo(f"  line {error.line_number}: {error.reason}")


@click.group('report')
def report_group():
    """Read-only reports."""


@report_group.command('summary')
@with_appcontext
def summary_cli():
    """Dashboard figures as JSON."""
    summary = reporting_service.dashboard_summary(get_backoffice())
    click.echo(json.dumps(summary, indent=2, ensure_ascii=False))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(auth_group)
    app.cli.add_command(products_group)
    app.cli.add_command(report_group)
