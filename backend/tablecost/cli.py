# Overview: Flask CLI command group for bootstrapping and resetting the store.

# backend/tablecost/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask data <command> [options]
#
# - python -m flask data init
#   Create all tables (SQL backend). Use `flask db upgrade` for migrated deployments.
# - python -m flask data seed
#   Insert the demo cafe: ingredients, recipes, products, sales, operational costs.
# - python -m flask data wipe --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# The memory backend lives inside the server process, so these commands only
# make sense against the SQL backend. Start the server with
# STORAGE_BACKEND=memory SEED_SAMPLE_DATA=1 for an in-memory demo instead.

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .storage import get_storage, seed_sample_data


def _require_sql_backend() -> bool:
    if get_storage().backend_name != "sql":
        click.echo("FAIL This command needs STORAGE_BACKEND=sql (memory data lives in the server process).")
        return False
    return True


@click.group('data')
def data_group():
    """Store bootstrap and reset commands."""


@data_group.command('init')
@with_appcontext
def init_data():
    """Create all tables that do not exist yet."""
    if not _require_sql_backend():
        return
    db.create_all()
    click.echo(f"PASS Tables ready at {current_app.config['SQLALCHEMY_DATABASE_URI']}")


@data_group.command('seed')
@with_appcontext
def seed_data():
    """Insert sample records. Running it twice inserts them twice."""
    if not _require_sql_backend():
        return
    db.create_all()
    counts = seed_sample_data(get_storage())
    for kind, count in counts.items():
        click.echo(f"PASS Created {count} {kind.replace('_', ' ')}")


@data_group.command('wipe')
@click.option('--yes', is_flag=True, help='Confirm deleting every record')
@with_appcontext
def wipe_data(yes):
    """Drop and recreate all tables."""
    if not yes:
        click.echo("WARN Refusing to wipe without --yes")
        return
    if not _require_sql_backend():
        return
    db.drop_all()
    db.create_all()
    click.echo("PASS All tables dropped and recreated")


def register_commands(app):
    app.cli.add_command(data_group)
