"""
Authorization decorators for route-level access control.

Used together with Flask-Login's ``@login_required``::

    @bp.route('/<int:organization_id>/update', methods=['POST'])
    @login_required
    @organization_admin_required()
    def update(organization_id):
        ...

A non-admin is not shown an error page.  The request is logged,
a warning is flashed, and the user is sent back to the organization
page with nothing changed.
"""

import logging
from functools import wraps

from flask import abort, flash, redirect, request, url_for
from flask_login import current_user

logger = logging.getLogger(__name__)


def organization_admin_required(organization_id_kwarg: str = "organization_id"):
    """
    Restrict a route to the admin of the organization named in the URL.

    Args:
        organization_id_kwarg: Name of the route keyword argument holding
                               the organization's primary key.

    Unknown organizations return 404.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # Import here to avoid circular imports.
            from orgboard.services import (  # pylint: disable=import-outside-toplevel
                organization_service,
            )

            if not current_user.is_authenticated:
                abort(401)

            organization_id = kwargs.get(organization_id_kwarg)
            if organization_id is None:
                abort(400)

            organization = organization_service.get_organization_by_id(
                organization_id
            )
            if organization is None:
                abort(404)

            if not organization_service.is_admin(current_user, organization):
                logger.warning(
                    "Access denied: user %d (%s) is not admin of "
                    "organization %d for %s %s",
                    current_user.id,
                    current_user.email,
                    organization.id,
                    request.method,
                    request.path,
                )
                flash(
                    "Only the organization admin can do that.",
                    "warning",
                )
                return redirect(
                    url_for("organization.show", organization_id=organization.id)
                )
            return func(*args, **kwargs)

        return wrapper

    return decorator
