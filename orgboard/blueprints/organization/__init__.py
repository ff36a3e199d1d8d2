"""
Organization blueprint — create, edit, and delete organizations and
manage their members.
"""

from flask import Blueprint

bp = Blueprint(
    "organization",
    __name__,
    template_folder="templates",
)

from orgboard.blueprints.organization import routes  # noqa: E402, F401
