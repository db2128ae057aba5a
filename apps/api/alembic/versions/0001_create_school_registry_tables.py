"""create school registry tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

This migration:
1. Creates the reference tables (ntes, municipalities, typologies)
2. Creates users for the login endpoint
3. Creates school_units and the append-only homologations log

Deleting a school unit cascades to its homologation events.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "ntes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "municipalities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("nte_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["nte_id"], ["ntes.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_municipalities_nte_id", "municipalities", ["nte_id"])

    op.create_table(
        "typologies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_typologies_name", "typologies", ["name"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "school_units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sec_code", sa.String(length=50), nullable=False, server_default=""),
        sa.Column("uo_code", sa.String(length=50), nullable=True),
        sa.Column("status", sa.String(length=10), nullable=False, server_default="1"),
        sa.Column("municipality_id", sa.Integer(), nullable=False),
        sa.Column("typology_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(
            ["municipality_id"], ["municipalities.id"], ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(["typology_id"], ["typologies.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_school_units_name", "school_units", ["name"])
    op.create_index("ix_school_units_municipality_id", "school_units", ["municipality_id"])
    op.create_index("ix_school_units_typology_id", "school_units", ["typology_id"])

    homologation_action = postgresql.ENUM(
        "HOMOLOGATED",
        "UNHOMOLOGATED",
        name="homologation_action",
        create_type=False,
    )
    homologation_action.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "homologations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("school_unit_id", sa.Integer(), nullable=False),
        sa.Column("action", homologation_action, nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("performed_by", sa.String(length=255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["school_unit_id"], ["school_units.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_homologations_unit_created", "homologations", ["school_unit_id", "created_at"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_homologations_unit_created", table_name="homologations")
    op.drop_table("homologations")
    postgresql.ENUM(name="homologation_action").drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_school_units_typology_id", table_name="school_units")
    op.drop_index("ix_school_units_municipality_id", table_name="school_units")
    op.drop_index("ix_school_units_name", table_name="school_units")
    op.drop_table("school_units")

    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

    op.drop_index("ix_typologies_name", table_name="typologies")
    op.drop_table("typologies")

    op.drop_index("ix_municipalities_nte_id", table_name="municipalities")
    op.drop_table("municipalities")

    op.drop_table("ntes")
