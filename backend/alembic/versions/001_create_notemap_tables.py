"""Create users, entries and facilities tables

Revision ID: 001
Revises: None
Create Date: 2026-02-21 00:00:00.000000+00:00

What:  Initial schema.
       users       one row per anonymous identity (uid cookie)
       entries     transcriptions, owned by a user id
       facilities  provider records; normally loaded by an external import,
                   created here so a fresh database is usable

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Frozen copy of the capability columns as of this revision
CAPABILITY_COLUMNS = (
    "telehealth",
    "medicaid",
    "sliding_scale",
    "private_insurance",
    "trauma_care",
    "co_occurring",
    "serves_veterans",
    "serves_lgbtq",
    "serves_children",
    "serves_young_adults",
    "serves_seniors",
    "cbt",
    "dbt",
    "emdr",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False, comment="Opaque identity from the uid cookie"),
        sa.Column("name", sa.String(100), nullable=True, comment="Display name chosen by the user"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )

    op.create_table(
        "entries",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("text", sa.Text(), server_default=sa.text("''"), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_entries"),
    )
    op.create_index("entries_user_id_idx", "entries", ["user_id"])
    op.create_index(
        "idx_entries_created_at",
        "entries",
        [sa.text("created_at DESC")],
    )

    op.create_table(
        "facilities",
        sa.Column("facility_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(16), nullable=False),
        sa.Column("zip", sa.String(16), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("lat", sa.Float(), nullable=True),
        sa.Column("lng", sa.Float(), nullable=True),
        sa.Column("geocoded_at", sa.DateTime(timezone=True), nullable=True),
        *[
            sa.Column(name, sa.Boolean(), server_default=sa.false(), nullable=False)
            for name in CAPABILITY_COLUMNS
        ],
        sa.PrimaryKeyConstraint("facility_id", name="pk_facilities"),
    )
    op.create_index("ix_facilities_state", "facilities", ["state"])
    op.create_index(
        "idx_facilities_needs_geocoding",
        "facilities",
        ["geocoded_at"],
        postgresql_where=sa.text("geocoded_at IS NULL"),
        sqlite_where=sa.text("geocoded_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("idx_facilities_needs_geocoding", table_name="facilities")
    op.drop_index("ix_facilities_state", table_name="facilities")
    op.drop_table("facilities")
    op.drop_index("idx_entries_created_at", table_name="entries")
    op.drop_index("entries_user_id_idx", table_name="entries")
    op.drop_table("entries")
    op.drop_table("users")
