"""
Custom Flask CLI commands.

These commands are registered with the app by ``register_commands()``
in the application factory. Run them with ``flask <command_name>``.

Usage::

    flask db-check      # Verify database connectivity and tables
    flask create-db     # Create missing tables without migrations
"""

import click
from flask import current_app
from flask.cli import with_appcontext
from sqlalchemy import inspect

from orgboard.extensions import db

# Tables every deployment must have.
_EXPECTED_TABLES = ("user", "organization", "audit_log")


@click.command("db-check")
@with_appcontext
def db_check_command():
    """
    Verify database connectivity and confirm the expected tables exist.

    Useful for confirming DATABASE_URL is correct and that
    ``flask db upgrade`` has been run.
    """
    click.echo("=" * 60)
    click.echo("  Orgboard — Database Connectivity Check")
    click.echo("=" * 60)

    # Hide any password embedded in the URL.
    db_url = db.engine.url.render_as_string(hide_password=True)
    click.echo(f"\n  Connection string: {db_url}\n")

    # -- Step 1: Basic connectivity ----------------------------------------
    click.echo("[1/2] Testing connection...")
    try:
        row = db.session.execute(db.text("SELECT 1 AS connected")).fetchone()
    except Exception as exc:  # pylint: disable=broad-exception-caught
        click.secho(f"      ✗ Connection failed: {exc}", fg="red")
        click.echo("\n  Troubleshooting tips:")
        click.echo("    - Is the database server running?")
        click.echo("    - Does DATABASE_URL match your server config?")
        raise SystemExit(1)

    if not row or row[0] != 1:
        click.secho("      ✗ Unexpected result from test query.", fg="red")
        raise SystemExit(1)
    click.secho(f"      ✓ Connected ({db.engine.dialect.name}).", fg="green")

    # -- Step 2: Tables ----------------------------------------------------
    click.echo("[2/2] Checking tables...\n")
    found = set(inspect(db.engine).get_table_names())
    missing = [name for name in _EXPECTED_TABLES if name not in found]

    for name in _EXPECTED_TABLES:
        marker = "✗" if name in missing else "✓"
        click.echo(f"      {marker} {name}")

    if missing:
        click.secho(
            f"\n      Missing table(s): {', '.join(missing)}. "
            "Run: flask db upgrade",
            fg="red",
        )
        raise SystemExit(1)

    click.echo("\n" + "=" * 60)
    click.secho("  All checks passed. Database is ready.", fg="green", bold=True)
    click.echo("=" * 60)


@click.command("create-db")
@with_appcontext
def create_db_command():
    """Create any missing tables directly from the models."""
    # Import so every model is registered on the metadata.
    import orgboard.models  # noqa: F401  pylint: disable=import-outside-toplevel,unused-import

    db.create_all()
    click.secho(
        f"Tables created on {current_app.config['SQLALCHEMY_DATABASE_URI']}",
        fg="green",
    )


def register_commands(app):
    """Register all custom CLI commands with the Flask application."""
    app.cli.add_command(db_check_command)
    app.cli.add_command(create_db_command)
