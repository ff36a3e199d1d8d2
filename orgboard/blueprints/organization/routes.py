"""
Routes for the organization blueprint.

Every route requires a signed-in user.  Changing an organization
(update, destroy, and member management) additionally requires being
its admin, enforced by ``@organization_admin_required``.  Validation
problems are flashed and the user is redirected; no route answers a
bad form with an error status.
"""

from flask import abort, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required

from orgboard.blueprints.organization import bp
from orgboard.decorators import organization_admin_required
from orgboard.services import organization_service, user_service


def _get_or_404(organization_id: int):
    organization = organization_service.get_organization_by_id(organization_id)
    if organization is None:
        abort(404)
    return organization


# =========================================================================
# Read-only views
# =========================================================================


@bp.route("/")
@login_required
def index():
    """List all organizations."""
    organizations = organization_service.get_organizations()
    return render_template(
        "organization/index.html",
        organizations=organizations,
    )


@bp.route("/new")
@login_required
def new():
    """Render the create-organization form."""
    return render_template("organization/new.html", form_data={})


@bp.route("/<int:organization_id>")
@login_required
def show(organization_id):
    """Show an organization with its members."""
    organization = _get_or_404(organization_id)
    is_admin = organization_service.is_admin(current_user, organization)

    # Candidates for the add-member dropdown are only needed by the admin.
    candidates = user_service.get_users_without_organization() if is_admin else []

    return render_template(
        "organization/show.html",
        organization=organization,
        members=organization.members.all(),
        is_admin=is_admin,
        candidates=candidates,
    )


@bp.route("/<int:organization_id>/edit")
@login_required
@organization_admin_required()
def edit(organization_id):
    """Render the edit form for an organization."""
    organization = _get_or_404(organization_id)
    return render_template("organization/edit.html", organization=organization)


# =========================================================================
# Create / update / destroy
# =========================================================================


@bp.route("/", methods=["POST"])
@login_required
def create():
    """Create an organization with the current user as admin and member."""
    name = request.form.get("name", "")
    homesite_url = request.form.get("homesite_url")

    try:
        organization = organization_service.create_organization(
            current_user,
            name=name,
            homesite_url=homesite_url,
        )
    except ValueError as exc:
        flash(str(exc), "danger")
        return render_template("organization/new.html", form_data=request.form)

    flash(f"Organization '{organization.name}' created.", "success")
    return redirect(url_for("organization.show", organization_id=organization.id))


@bp.route("/<int:organization_id>/update", methods=["POST"])
@bp.route("/<int:organization_id>", methods=["PUT", "PATCH"])
@login_required
@organization_admin_required()
def update(organization_id):
    """
    Apply a partial update.

    Only fields present in the form are touched, and each one is
    validated separately, so a rejected name does not block a new
    homesite URL sent with it.
    """
    organization = _get_or_404(organization_id)

    errors = organization_service.update_organization(
        organization,
        current_user,
        name=request.form.get("name"),
        homesite_url=request.form.get("homesite_url"),
    )

    if errors:
        for message in errors:
            flash(message, "danger")
        return redirect(url_for("organization.edit", organization_id=organization_id))

    flash("Organization updated.", "success")
    return redirect(url_for("organization.show", organization_id=organization_id))


@bp.route("/<int:organization_id>", methods=["DELETE"])
@bp.route("/<int:organization_id>/delete", methods=["POST"])
@login_required
@organization_admin_required()
def destroy(organization_id):
    """Delete an organization and release its members."""
    organization = _get_or_404(organization_id)
    name = organization.name

    organization_service.destroy_organization(organization, current_user)

    flash(f"Organization '{name}' deleted.", "info")
    return redirect(url_for("organization.index"))


# =========================================================================
# Membership
# =========================================================================


@bp.route("/<int:organization_id>/members", methods=["POST"])
@login_required
@organization_admin_required()
def add_member(organization_id):
    """Add the user given by ``new_member_id`` to the organization."""
    organization = _get_or_404(organization_id)
    new_member_id = request.form.get("new_member_id", type=int)

    try:
        member = organization_service.add_member(
            organization, current_user, new_member_id
        )
        flash(f"{member.name} is a member of {organization.name}.", "success")
    except ValueError as exc:
        flash(str(exc), "danger")

    return redirect(url_for("organization.show", organization_id=organization_id))


@bp.route("/<int:organization_id>/members/remove", methods=["POST"])
@login_required
@organization_admin_required()
def remove_member(organization_id):
    """Remove the user given by ``user_id`` from the organization."""
    organization = _get_or_404(organization_id)
    user_id = request.form.get("user_id", type=int)

    try:
        member = organization_service.remove_member(
            organization, current_user, user_id
        )
        flash(f"{member.name} was removed from {organization.name}.", "info")
    except ValueError as exc:
        flash(str(exc), "danger")

    return redirect(url_for("organization.show", organization_id=organization_id))
