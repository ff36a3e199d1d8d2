"""
Routes for the auth blueprint — sign-in, registration, and sign-out.

Users sign in with email and password; Flask-Login keeps them signed in
through the session cookie.

The development-only ``/dev-login`` route bypasses the password check
when ``DEV_LOGIN_ENABLED`` is set, so seeded users can be switched
between quickly while working on organization permissions.
"""

from flask import (
    current_app,
    flash,
    redirect,
    render_template,
    request,
    url_for,
)
from flask_login import current_user, login_required, login_user, logout_user

from orgboard.blueprints.auth import bp
from orgboard.extensions import db
from orgboard.services import audit_service, user_service


def _safe_next_url() -> str:
    """Return the ``next`` parameter if it is a local path, else the dashboard."""
    next_url = request.args.get("next", "")
    if next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return url_for("main.dashboard")


@bp.route("/login", methods=["GET", "POST"])
def login():
    """Render the sign-in form, or sign the user in on POST."""
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    if request.method == "POST":
        email = request.form.get("email", "").strip()
        password = request.form.get("password", "")

        user = user_service.authenticate(email, password)
        if user is None:
            flash("Invalid email or password.", "danger")
            return render_template("auth/login.html", email=email), 200

        login_user(user, remember=request.form.get("remember") == "1")
        audit_service.log_login(user.id)
        db.session.commit()
        flash(f"Welcome, {user.name}!", "success")
        return redirect(_safe_next_url())

    return render_template("auth/login.html", email="")


@bp.route("/register", methods=["GET", "POST"])
def register():
    """Create an account and sign the new user in."""
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    if request.method == "POST":
        password = request.form.get("password", "")
        if len(password) < 8:
            flash("Password must be at least 8 characters.", "danger")
            return render_template("auth/register.html", form_data=request.form)

        try:
            user = user_service.create_user(
                name=request.form.get("name", ""),
                email=request.form.get("email", ""),
                password=password,
            )
        except ValueError as exc:
            flash(str(exc), "danger")
            return render_template("auth/register.html", form_data=request.form)

        login_user(user)
        flash(f"Welcome, {user.name}!", "success")
        return redirect(url_for("main.dashboard"))

    return render_template("auth/register.html", form_data={})


@bp.route("/logout")
@login_required
def logout():
    """Sign the user out and return to the sign-in page."""
    audit_service.log_logout(current_user.id)
    db.session.commit()
    logout_user()
    flash("You have been signed out.", "info")
    return redirect(url_for("auth.login"))


# =========================================================================
# Development-Only Routes
# =========================================================================


@bp.route("/dev-login")
def dev_login():
    """
    Development-only login bypass.

    Signs in as the user given by the ``user_id`` query parameter, or
    the first active user when none is given.  Disabled unless
    ``DEV_LOGIN_ENABLED`` is true.

    Examples::

        /auth/dev-login              -> first active user
        /auth/dev-login?user_id=7    -> user with id=7
    """
    if not current_app.config.get("DEV_LOGIN_ENABLED"):
        flash("Development login is disabled.", "danger")
        return redirect(url_for("auth.login"))

    # Import models inside the route to avoid circular imports.
    from orgboard.models.user import User  # pylint: disable=import-outside-toplevel

    user_id_param = request.args.get("user_id", type=int)
    query = User.query.filter(
        User.is_active == True,  # pylint: disable=singleton-comparison
    )
    if user_id_param is not None:
        query = query.filter(User.id == user_id_param)
    target_user = query.order_by(User.id).first()

    if target_user is None:
        flash(
            "No matching active user. Run the seed command first: "
            "flask seed-dev-users",
            "warning",
        )
        return redirect(url_for("auth.login"))

    login_user(target_user)
    flash(f"Dev login: signed in as {target_user.name}.", "info")
    return redirect(url_for("main.dashboard"))
