"""create contact_records table

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "contact_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("first_name", sa.String(length=20), nullable=False),
        sa.Column("last_name", sa.String(length=20), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, comment="Identity key for upserts"),
        sa.Column("phone_number", sa.String(length=10), nullable=True),
        sa.Column("eircode", sa.String(length=6), nullable=True),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_contact_records"),
        sa.UniqueConstraint("email", name="uq_contact_records_email"),
        sa.CheckConstraint("age IS NULL OR (age >= 0 AND age <= 120)", name="ck_contact_records_age_range"),
    )


def downgrade() -> None:
    op.drop_table("contact_records")
