"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them when ``flask db`` commands are run.
"""

from orgboard.models.audit import AuditLog  # noqa: F401
from orgboard.models.organization import Organization  # noqa: F401
from orgboard.models.user import User  # noqa: F401
