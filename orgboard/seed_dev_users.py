"""
Seed script — create development users for local testing.

Registers a ``flask seed-dev-users`` CLI command that creates (or
reactivates) a pair of local users.  Sign in as either one through the
``/auth/dev-login?user_id=<id>`` bypass to try the organization admin
and regular-member flows side by side.

Usage::

    flask seed-dev-users                       # Create with defaults
    flask seed-dev-users --password secret123  # Also set a password
    flask seed-dev-users --with-organization   # Make the first user admin
"""

import click
from flask.cli import with_appcontext

from orgboard.extensions import db
from orgboard.models.user import User
from orgboard.services import organization_service, user_service

# -- Default dev users ------------------------------------------------------
_DEV_USERS = (
    ("Dev Admin", "dev.admin@localhost"),
    ("Dev Member", "dev.member@localhost"),
)
_DEV_ORGANIZATION_NAME = "Dev Organization"


@click.command("seed-dev-users")
@click.option(
    "--password",
    default=None,
    help="Password to set on the dev users (omit for dev-login only).",
)
@click.option(
    "--with-organization",
    is_flag=True,
    default=False,
    help="Create an organization administered by the first dev user.",
)
@with_appcontext
def seed_dev_users_command(password: str | None, with_organization: bool):
    """
    Create the dev users, or reactivate them if they already exist.
    """
    click.echo("=" * 60)
    click.echo("  Orgboard — Seed Dev Users")
    click.echo("=" * 60)

    # -- Step 1: Create or update the users --------------------------------
    click.echo("\n[1/2] Creating dev users...")
    users = []
    for name, email in _DEV_USERS:
        user = user_service.get_user_by_email(email)
        if user is None:
            user = User(name=name, email=email, is_active=True)
            db.session.add(user)
            db.session.flush()
            click.secho(f"      ✓ Created {name} <{email}> (id={user.id})", fg="green")
        else:
            if not user.is_active:
                user.is_active = True
                click.echo(f"      → Reactivated {email}.")
            click.secho(f"      ✓ {email} already exists (id={user.id})", fg="green")

        if password:
            user.set_password(password)
        users.append(user)

    db.session.commit()

    # -- Step 2: Optional organization -------------------------------------
    click.echo("\n[2/2] Checking organization...")
    admin = users[0]
    if not with_organization:
        click.echo("      Skipped (pass --with-organization to create one).")
    elif admin.organization_id is not None:
        click.secho(
            f"      ✓ {admin.email} already belongs to organization "
            f"{admin.organization_id}.",
            fg="green",
        )
    else:
        organization = organization_service.create_organization(
            admin, name=_DEV_ORGANIZATION_NAME
        )
        click.secho(
            f"      ✓ Created '{organization.name}' (id={organization.id}) "
            f"with admin {admin.email}.",
            fg="green",
        )

    # -- Summary -----------------------------------------------------------
    click.echo("\n" + "=" * 60)
    click.secho("  Dev users are ready.", fg="green", bold=True)
    for user in users:
        click.echo(f"  {user.id:>4}  {user.name:<12} {user.email}")
    click.echo("=" * 60)
    click.echo("\n  → Start the app with FLASK_ENV=development, then visit")
    click.echo("    http://localhost:5000/auth/dev-login?user_id=<id>\n")


def register_seed_commands(app):
    """Register seed-related CLI commands with the Flask application."""
    app.cli.add_command(seed_dev_users_command)
