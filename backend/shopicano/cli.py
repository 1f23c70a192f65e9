# Overview: Flask CLI command groups for seeding and resetting the database.

# backend/shopicano/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply Alembic migrations (Flask-Migrate).
#
# Seeding:
# - python -m flask migration init
#   Create the settings row, default permission groups and the admin user.
#   Runs in one transaction and refuses to run twice.
#
# Development:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import Settings, User, UserPermission
from .models.settings import SETTINGS_ID
from .passwords import hash_password
from .permissions import ADMIN_GROUP_ID, DEFAULT_PERMISSION_GROUPS, join_permissions


@click.group(name="migration")
def migration_group():
    """Seed platform data."""
    pass


@click.group(name="system")
def system_group():
    """System maintenance commands."""
    pass


def seed_platform(session, admin_email: str, admin_password: str, bcrypt_rounds: int) -> User:
    """
    Stage the default settings, permission groups and admin user.

    Caller commits. Raises click.ClickException if settings already exist.
    """
    if session.get(Settings, SETTINGS_ID) is not None:
        raise click.ClickException("Platform already initialized (settings row exists)")

    session.add(Settings(
        id=SETTINGS_ID,
        name="Shopicano",
        is_sign_up_enabled=False,
        is_store_creation_enabled=False,
    ))

    for group_id, name, codes in DEFAULT_PERMISSION_GROUPS:
        session.add(UserPermission(id=group_id, name=name, permission=join_permissions(codes)))

    admin = User(
        name="Admin",
        email=admin_email.strip().lower(),
        password=hash_password(admin_password, rounds=bcrypt_rounds),
        permission_id=ADMIN_GROUP_ID,
    )
    session.add(admin)
    return admin


@migration_group.command("init")
@with_appcontext
def init_platform():
    """
    Seed settings, permission groups and the admin user.

    Uses ADMIN_EMAIL / ADMIN_PASSWORD from config. Everything is written in
    a single commit; on any failure nothing is kept.
    """
    cfg = current_app.config
    try:
        admin = seed_platform(
            db.session,
            admin_email=cfg["ADMIN_EMAIL"],
            admin_password=cfg["ADMIN_PASSWORD"],
            bcrypt_rounds=cfg.get("BCRYPT_ROUNDS", 12),
        )
        db.session.commit()
    except click.ClickException:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Platform initialization failed")
        raise click.ClickException(f"Initialization failed: {e}") from e

    click.echo("PASS Settings created (sign-up and store creation disabled)")
    click.echo(f"PASS {len(DEFAULT_PERMISSION_GROUPS)} permission groups created")
    click.echo(f"PASS Admin user created: {admin.email}")


@system_group.command("reset-db")
@click.option("--yes", is_flag=True, help="Skip confirmation")
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

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask migration init' to seed it.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(migration_group)
    app.cli.add_command(system_group)
