import os
import random
import click
from flask import current_app
from flask.cli import with_appcontext
from flask_migrate import upgrade as alembic_upgrade, stamp as alembic_stamp, migrate as alembic_migrate
from models import db
from models.product import Product
from storefront.services.errors import StorefrontError
from storefront.services.orders import advance_status
from storefront.utils.db import transactional

DEMO_CATEGORIES = ("Hantle", "Kettlebelle", "Gumy oporowe", "Maty", "Suplementy")


def _assert_safe_for_upgrade():
    # Prevent accidental prod upgrades unless explicitly allowed
    env = (current_app.config.get("ENV") or "").lower()
    app_env = (os.getenv("APP_ENV") or "").lower()
    if app_env == "production" or env == "production":
        if (os.getenv("ALLOW_DB_MIGRATIONS") or "").lower() not in ("1", "true", "yes"):
            raise click.ClickException("Refusing to run DB migration in production without ALLOW_DB_MIGRATIONS=true")


@click.command("db-migrate-safe")
@click.option("-m", "--message", default="auto migration", help="Migration message")
@with_appcontext
def db_migrate_safe(message):
    """Generate a new migration script from current models."""
    alembic_migrate(message=message)
    click.echo("Migration script generated.")


@click.command("db-upgrade-safe")
@with_appcontext
def db_upgrade_safe():
    """Apply migrations to the configured database."""
    _assert_safe_for_upgrade()
    alembic_upgrade()
    click.echo("Database upgraded.")


@click.command("db-stamp-safe")
@click.option("--revision", default="head", help="Revision to stamp, default 'head'")
@with_appcontext
def db_stamp_safe(revision):
    """Mark the database at a given revision without running migrations."""
    _assert_safe_for_upgrade()
    alembic_stamp(revision)
    click.echo(f"Database stamped at {revision}.")


@click.command("seed-demo")
@click.option("--per-category", default=4, show_default=True, help="Products per category")
@click.option("--seed", default=None, type=int, help="Random seed for repeatable data")
@with_appcontext
def seed_demo(per_category, seed):
    """Fill an empty catalog with demo fitness products."""
    if (os.getenv("APP_ENV") or "").lower() == "production":
        raise click.ClickException("Refusing to seed demo data in production")
    if Product.query.count():
        click.echo("Catalog is not empty, nothing to do.")
        return
    rng = random.Random(seed)
    created = 0
    with transactional("Demo seed failed"):
        for category in DEMO_CATEGORIES:
            for n in range(1, per_category + 1):
                name = f"{category} {n}"
                db.session.add(
                    Product(
                        name=name,
                        slug=f"{category.lower().replace(' ', '-')}-{n}",
                        description=f"{category}, model {n}",
                        price=rng.randint(2999, 299999),
                        stock=rng.randint(0, 150),
                        images=[],
                        active=True,
                    )
                )
                created += 1
    click.echo(f"Seeded {created} products.")


@click.command("order-status")
@click.argument("order_id", type=int)
@click.argument("status")
@click.option("--actor", default="cli", help="Recorded in the status log")
@with_appcontext
def order_status(order_id, status, actor):
    """Move an order along its lifecycle (pending, paid, shipped, delivered, cancelled)."""
    try:
        with transactional("Order status change failed"):
            order = advance_status(order_id, status, actor)
            new_status = order.status
    except StorefrontError as e:
        raise click.ClickException(e.message)
    click.echo(f"Order {order_id} is now {new_status}.")


def register_cli(app):
    app.cli.add_command(db_migrate_safe)
    app.cli.add_command(db_upgrade_safe)
    app.cli.add_command(db_stamp_safe)
    app.cli.add_command(seed_demo)
    app.cli.add_command(order_status)
