# Overview: Flask CLI command groups for bootstrap and reminder maintenance.

# backend/repairshop/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py.
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` for migrations).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask products list
#   List products with price and stock.
# - python -m flask products upsert --sku SCR-X1 --name "X1 screen" --price-cents 12900 --stock 4
#   Create or overwrite a product by SKU.
#
# Reminders:
# - python -m flask reminders schedule 42
#   Enqueue another 1/20/30-day reminder set for ticket 42.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import ServiceError
from .extensions import db
from .services import products_service, ticket_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create missing tables."""
    db.create_all()
    click.echo("PASS Tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database reset")


@click.group('products')
def products_group():
    """Product catalog commands."""


@products_group.command('list')
@with_appcontext
def list_products():
    """List products with price and stock."""
    products = products_service.list_products()
    if not products:
        click.echo("No products")
        return
    for p in products:
        click.echo(f"{p.id:>5}  {p.sku:<16} {p.name:<32} {p.price_cents:>10}c  stock={p.stock}")


@products_group.command('upsert')
@click.option('--sku', required=True)
@click.option('--name', required=True)
@click.option('--price-cents', type=int, default=None)
@click.option('--stock', type=int, default=None)
@with_appcontext
def upsert_product(sku, name, price_cents, stock):
    """Create or overwrite a product by SKU."""
    payload = {"sku": sku, "name": name}
    if price_cents is not None:
        payload["price_cents"] = price_cents
    if stock is not None:
        payload["stock"] = stock

    try:
        product, created = products_service.upsert_product(payload)
    except ServiceError as e:
        raise click.ClickException(str(e))

    verb = "Created" if created else "Updated"
    click.echo(f"PASS {verb} product {product.sku} (ID: {product.id}, stock={product.stock})")


@click.group('reminders')
def reminders_group():
    """Reminder queue commands."""


@reminders_group.command('schedule')
@click.argument('ticket_id', type=int)
@with_appcontext
def schedule_reminders(ticket_id):
    """Enqueue another reminder set for a ticket (not deduplicated)."""
    try:
        ticket = ticket_service.get_ticket(ticket_id)
    except ServiceError as e:
        raise click.ClickException(str(e))

    enqueued = current_app.extensions["reminder_scheduler"].schedule_reminders(ticket.id)
    if enqueued == 0:
        raise click.ClickException(f"No reminders could be enqueued for {ticket.code}")
    click.echo(f"PASS Enqueued {enqueued} reminder(s) for {ticket.code}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(products_group)
    app.cli.add_command(reminders_group)
