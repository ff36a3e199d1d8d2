"""
Organization model.

An organization has one admin (``admin_id``) and a member set made of
every user whose ``organization_id`` points at it.  The admin is added
as the first member when the organization is created.
"""

from orgboard.extensions import db


class Organization(db.Model):
    """
    A named group of users administered by a single user.

    ``homesite_url`` is free text; no URL validation is applied.
    ``members`` is a dynamic relationship so callers can use
    ``organization.members.count()`` without loading every row.
    """

    __tablename__ = "organization"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(200), nullable=False)
    homesite_url = db.Column(db.String(500), nullable=True)
    # ``use_alter`` breaks the user <-> organization foreign key cycle
    # for CREATE/DROP ordering.
    admin_id = db.Column(
        db.Integer,
        db.ForeignKey(
            "user.id", use_alter=True, name="FK_organization_admin_id_user"
        ),
        nullable=False,
        index=True,
    )
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
    admin = db.relationship("User", foreign_keys=[admin_id])
    members = db.relationship(
        "User",
        back_populates="organization",
        foreign_keys="User.organization_id",
        lazy="dynamic",
        order_by="[User.organization_joined_at, User.id]",
    )

    def __repr__(self) -> str:
        return f"<Organization {self.id}: {self.name}>"
