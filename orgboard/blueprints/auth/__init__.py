"""
Auth blueprint — sign-in, registration, and sign-out.
"""

from flask import Blueprint

bp = Blueprint(
    "auth",
    __name__,
    template_folder="templates",
)

from orgboard.blueprints.auth import routes  # noqa: E402, F401
