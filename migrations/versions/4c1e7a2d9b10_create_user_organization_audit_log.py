"""Create user, organization and audit_log tables

Revision ID: 4c1e7a2d9b10
Revises:
Create Date: 2026-10-17 09:12:44.118203

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4c1e7a2d9b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create the three application tables."""
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("password_hash", sa.String(length=256), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=True),
        sa.Column("organization_joined_at", sa.DateTime(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)
    op.create_index("ix_user_organization_id", "user", ["organization_id"])

    op.create_table(
        "organization",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("homesite_url", sa.String(length=500), nullable=True),
        sa.Column("admin_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["admin_id"], ["user.id"], name="FK_organization_admin_id_user"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_organization_admin_id", "organization", ["admin_id"])

    # The user -> organization key is added after both tables exist.
    with op.batch_alter_table("user") as batch_op:
        batch_op.create_foreign_key(
            "FK_user_organization_id_organization",
            "organization",
            ["organization_id"],
            ["id"],
        )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.Column("action_type", sa.String(length=50), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("previous_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade():
    """Drop the application tables."""
    op.drop_table("audit_log")
    with op.batch_alter_table("user") as batch_op:
        batch_op.drop_constraint(
            "FK_user_organization_id_organization", type_="foreignkey"
        )
    op.drop_index("ix_organization_admin_id", table_name="organization")
    op.drop_table("organization")
    op.drop_index("ix_user_organization_id", table_name="user")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
