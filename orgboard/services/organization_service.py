"""
Organization service — create, update, and destroy organizations and
manage their members.

Only an organization's admin may change it.  Every mutating function
checks this itself and raises ``PermissionError`` for anyone else.
Validation problems raise ``ValueError`` with a message suitable for
flashing to the user.
"""

import logging
from datetime import datetime, timezone

from orgboard.extensions import db
from orgboard.models.organization import Organization
from orgboard.models.user import User
from orgboard.services import audit_service, user_service

logger = logging.getLogger(__name__)

_NAME_MAX_LENGTH = 200
_URL_MAX_LENGTH = 500


# -- Queries ---------------------------------------------------------------


def get_organization_by_id(organization_id: int) -> Organization | None:
    """Return an organization by primary key, or None if not found."""
    return db.session.get(Organization, organization_id)


def get_organizations():
    """Return all organizations ordered by name."""
    return Organization.query.order_by(Organization.name, Organization.id).all()


def count_organizations() -> int:
    return Organization.query.count()


def is_admin(user: User, organization: Organization) -> bool:
    """Return True if ``user`` is the admin of ``organization``."""
    if user is None or not getattr(user, "is_authenticated", False):
        return False
    return user.is_admin_of(organization)


# -- Validation helpers ----------------------------------------------------


def _clean_name(name: str | None) -> str:
    """Strip and validate an organization name, raising ValueError."""
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValueError("Organization name can't be blank.")
    if len(cleaned) > _NAME_MAX_LENGTH:
        raise ValueError(
            f"Organization name must be at most {_NAME_MAX_LENGTH} characters."
        )
    return cleaned


def _clean_url(homesite_url: str | None) -> str | None:
    """Strip a homesite URL; blank becomes None.  No format check."""
    cleaned = (homesite_url or "").strip()
    if len(cleaned) > _URL_MAX_LENGTH:
        raise ValueError(
            f"Homesite URL must be at most {_URL_MAX_LENGTH} characters."
        )
    return cleaned or None


def _require_admin(organization: Organization, acting_user: User, action: str) -> None:
    """Raise PermissionError unless ``acting_user`` administers the org."""
    if not is_admin(acting_user, organization):
        logger.warning(
            "Denied %s on organization %s for user %s (admin is %s)",
            action,
            organization.id,
            getattr(acting_user, "id", None),
            organization.admin_id,
        )
        raise PermissionError(
            "Only the organization admin can perform this action."
        )


def _snapshot(organization: Organization) -> dict:
    return {
        "name": organization.name,
        "homesite_url": organization.homesite_url,
        "admin_id": organization.admin_id,
    }


def _join(user: User, organization: Organization) -> None:
    user.organization_id = organization.id
    user.organization_joined_at = datetime.now(timezone.utc)


def _leave(user: User) -> None:
    user.organization_id = None
    user.organization_joined_at = None


# -- Create / destroy ------------------------------------------------------


def create_organization(
    user: User,
    name: str | None,
    homesite_url: str | None = None,
) -> Organization:
    """
    Create an organization administered by ``user``.

    The creator becomes the admin and the first member.  A plain member
    of another organization moves over to the new one.  The admin of
    another organization is rejected.

    Args:
        user:         The signed-in user creating the organization.
        name:         Organization name; required.
        homesite_url: Optional homepage address, stored as given.

    Returns:
        The newly created Organization record.

    Raises:
        ValueError: If the name is blank or the user already administers
                    an organization.
    """
    cleaned_name = _clean_name(name)
    cleaned_url = _clean_url(homesite_url)

    administered = Organization.query.filter_by(admin_id=user.id).first()
    if administered is not None:
        raise ValueError(
            f"You are the admin of {administered.name}. "
            "Delete it before creating a new organization."
        )
    previous_organization_id = user.organization_id

    organization = Organization(
        name=cleaned_name,
        homesite_url=cleaned_url,
        admin_id=user.id,
    )
    db.session.add(organization)
    # Flush to get the organization id before the admin joins it.
    db.session.flush()

    _join(user, organization)

    if previous_organization_id is not None:
        audit_service.log_change(
            user_id=user.id,
            action_type="REMOVE_MEMBER",
            entity_type="organization",
            entity_id=previous_organization_id,
            previous_value={"user_id": user.id},
        )
        logger.info(
            "User %s left organization %s to create a new one",
            user.id,
            previous_organization_id,
        )

    audit_service.log_change(
        user_id=user.id,
        action_type="CREATE",
        entity_type="organization",
        entity_id=organization.id,
        new_value=_snapshot(organization),
    )
    db.session.commit()

    logger.info(
        "User %s created organization %s (%s)",
        user.id,
        organization.id,
        organization.name,
    )
    return organization


def destroy_organization(organization: Organization, acting_user: User) -> None:
    """
    Delete an organization and release all of its members.

    Raises:
        PermissionError: If ``acting_user`` is not the admin.
    """
    _require_admin(organization, acting_user, "destroy")

    organization_id = organization.id
    previous = _snapshot(organization)
    member_ids = []
    for member in organization.members.all():
        member_ids.append(member.id)
        _leave(member)
    # Members must be detached before the row they point at goes away.
    db.session.flush()

    db.session.delete(organization)

    previous["member_ids"] = member_ids
    audit_service.log_change(
        user_id=acting_user.id,
        action_type="DELETE",
        entity_type="organization",
        entity_id=organization_id,
        previous_value=previous,
    )
    db.session.commit()

    logger.info(
        "User %s destroyed organization %s, released %d member(s)",
        acting_user.id,
        organization_id,
        len(member_ids),
    )


# -- Update ----------------------------------------------------------------


def update_organization(
    organization: Organization,
    acting_user: User,
    name: str | None = None,
    homesite_url: str | None = None,
) -> list[str]:
    """
    Apply a partial update to an organization.

    Each field is validated on its own: a blank ``name`` is rejected and
    the stored name kept, while a ``homesite_url`` sent alongside it is
    still saved.  Fields passed as None are left untouched.

    Returns:
        Validation error messages for the rejected fields; empty when
        every provided field was applied.

    Raises:
        PermissionError: If ``acting_user`` is not the admin.
    """
    _require_admin(organization, acting_user, "update")

    errors: list[str] = []
    previous: dict = {}
    changed: dict = {}

    if name is not None:
        try:
            cleaned_name = _clean_name(name)
        except ValueError as exc:
            errors.append(str(exc))
        else:
            if cleaned_name != organization.name:
                previous["name"] = organization.name
                changed["name"] = cleaned_name
                organization.name = cleaned_name

    if homesite_url is not None:
        try:
            cleaned_url = _clean_url(homesite_url)
        except ValueError as exc:
            errors.append(str(exc))
        else:
            if cleaned_url != organization.homesite_url:
                previous["homesite_url"] = organization.homesite_url
                changed["homesite_url"] = cleaned_url
                organization.homesite_url = cleaned_url

    if changed:
        audit_service.log_change(
            user_id=acting_user.id,
            action_type="UPDATE",
            entity_type="organization",
            entity_id=organization.id,
            previous_value=previous,
            new_value=changed,
        )
        db.session.commit()
        logger.info(
            "User %s updated organization %s: %s",
            acting_user.id,
            organization.id,
            ", ".join(sorted(changed)),
        )

    if errors:
        logger.info(
            "Rejected fields for organization %s: %s",
            organization.id,
            "; ".join(errors),
        )
    return errors


# -- Membership ------------------------------------------------------------


def add_member(
    organization: Organization,
    acting_user: User,
    new_member_id: int | None,
) -> User:
    """
    Add a user to an organization.

    Adding a user who is already a member changes nothing; their place
    in the member order is kept.

    Returns:
        The member User record.

    Raises:
        PermissionError: If ``acting_user`` is not the admin.
        ValueError:      If the user does not exist or belongs to a
                         different organization.
    """
    _require_admin(organization, acting_user, "add_member")

    user = (
        user_service.get_user_by_id(new_member_id)
        if new_member_id is not None
        else None
    )
    if user is None:
        raise ValueError(f"User ID {new_member_id} not found.")

    if user.organization_id == organization.id:
        logger.debug(
            "User %s is already a member of organization %s",
            user.id,
            organization.id,
        )
        return user

    if user.organization_id is not None:
        raise ValueError(f"{user.name} already belongs to another organization.")

    _join(user, organization)

    audit_service.log_change(
        user_id=acting_user.id,
        action_type="ADD_MEMBER",
        entity_type="organization",
        entity_id=organization.id,
        new_value={"user_id": user.id},
    )
    db.session.commit()

    logger.info("Added user %s to organization %s", user.id, organization.id)
    return user


def remove_member(
    organization: Organization,
    acting_user: User,
    user_id: int | None,
) -> User:
    """
    Remove a member from an organization.

    Returns:
        The removed User record.

    Raises:
        PermissionError: If ``acting_user`` is not the admin.
        ValueError:      If the user does not exist, is not a member, or
                         is the admin (destroy the organization instead).
    """
    _require_admin(organization, acting_user, "remove_member")

    user = user_service.get_user_by_id(user_id) if user_id is not None else None
    if user is None:
        raise ValueError(f"User ID {user_id} not found.")
    if user.organization_id != organization.id:
        raise ValueError(f"{user.name} is not a member of {organization.name}.")
    if user.id == organization.admin_id:
        raise ValueError(
            "The admin cannot be removed. Delete the organization instead."
        )

    _leave(user)

    audit_service.log_change(
        user_id=acting_user.id,
        action_type="REMOVE_MEMBER",
        entity_type="organization",
        entity_id=organization.id,
        previous_value={"user_id": user.id},
    )
    db.session.commit()

    logger.info("Removed user %s from organization %s", user.id, organization.id)
    return user
