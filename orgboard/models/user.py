"""
User model.

A user signs in with email and password and belongs to at most one
organization through the nullable ``organization_id`` column.
"""

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from orgboard.extensions import db


class User(UserMixin, db.Model):
    """
    Application user record.

    Inherits from ``UserMixin`` to satisfy Flask-Login requirements
    (``is_authenticated``, ``get_id``).  ``is_active`` is a real column
    so deactivated users cannot sign in.

    ``organization_joined_at`` records when the user joined their
    current organization; member lists are ordered by it.
    """

    # ``user`` is a reserved word on some backends; SQLAlchemy quotes it.
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    organization_id = db.Column(
        db.Integer,
        db.ForeignKey(
            "organization.id", name="FK_user_organization_id_organization"
        ),
        nullable=True,
        index=True,
    )
    organization_joined_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.current_timestamp()
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        server_default=db.func.current_timestamp(),
        onupdate=db.func.current_timestamp(),
    )

    # -- Relationships -----------------------------------------------------
    organization = db.relationship(
        "Organization",
        back_populates="members",
        foreign_keys=[organization_id],
    )

    # ---- Passwords -------------------------------------------------------

    def set_password(self, raw_password: str) -> None:
        """Store a salted hash of ``raw_password``."""
        self.password_hash = generate_password_hash(raw_password)

    def check_password(self, raw_password: str) -> bool:
        """Return True if ``raw_password`` matches the stored hash."""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw_password)

    # ---- Organization checks ---------------------------------------------

    def is_admin_of(self, organization) -> bool:
        """Check if this user is the admin of the given organization."""
        return organization is not None and organization.admin_id == self.id

    def __repr__(self) -> str:
        return f"<User {self.email} org={self.organization_id}>"
