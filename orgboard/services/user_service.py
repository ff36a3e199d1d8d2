"""
User service — user lookup, registration, and password sign-in.
"""

import logging

from orgboard.extensions import db
from orgboard.models.user import User
from orgboard.services import audit_service

logger = logging.getLogger(__name__)


# -- User lookup -----------------------------------------------------------


def get_user_by_id(user_id: int) -> User | None:
    """Return a user by primary key, or None if not found."""
    return db.session.get(User, user_id)


def get_user_by_email(email: str) -> User | None:
    """Return a user by exact email address, ignoring case."""
    return User.query.filter(
        db.func.lower(User.email) == email.strip().lower()
    ).first()


def get_users_without_organization():
    """Return active users who do not belong to any organization."""
    return (
        User.query.filter(
            User.organization_id.is_(None),
            User.is_active == True,  # pylint: disable=singleton-comparison
        )
        .order_by(User.name)
        .all()
    )


# -- Registration and sign-in ----------------------------------------------


def create_user(name: str, email: str, password: str | None = None) -> User:
    """
    Create a new user account.

    Args:
        name:     Display name.
        email:    Email address; must be unique (case-insensitive).
        password: Raw password.  Users created without one can only
                  sign in through the dev-login bypass.

    Returns:
        The newly created User record.

    Raises:
        ValueError: If name or email is blank, or the email is taken.
    """
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name or not email:
        raise ValueError("Name and email are required.")
    if get_user_by_email(email) is not None:
        raise ValueError(f"An account for '{email}' already exists.")

    user = User(name=name, email=email)
    if password:
        user.set_password(password)
    db.session.add(user)
    db.session.flush()  # Get the user ID for audit logging.

    audit_service.log_change(
        user_id=user.id,
        action_type="CREATE",
        entity_type="user",
        entity_id=user.id,
        new_value={"name": name, "email": email},
    )
    db.session.commit()

    logger.info("Registered user %s", email)
    return user


def authenticate(email: str, password: str) -> User | None:
    """
    Return the active user matching ``email`` and ``password``.

    Returns None for unknown emails, wrong passwords, and deactivated
    accounts alike so the caller cannot tell them apart.
    """
    user = get_user_by_email(email or "")
    if user is None or not user.is_active:
        return None
    if not user.check_password(password or ""):
        logger.info("Failed sign-in for %s", email)
        return None
    return user
