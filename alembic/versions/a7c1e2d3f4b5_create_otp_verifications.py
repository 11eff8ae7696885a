"""create otp_verifications

Revision ID: a7c1e2d3f4b5
Revises:
Create Date: 2026-10-17 09:00:00.000000

One row per (email, application_id). The unique constraint is the conflict
target for the upsert performed when a code is issued.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a7c1e2d3f4b5"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the otp_verifications table."""
    op.create_table(
        "otp_verifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("application_id", sa.String(100), nullable=False),
        sa.Column("code", sa.String(6), nullable=False),
        sa.Column("consumed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "email", "application_id", name="uq_otp_verifications_email_application"
        ),
    )
    op.create_index("ix_otp_verifications_expires_at", "otp_verifications", ["expires_at"])


def downgrade() -> None:
    """Drop the otp_verifications table."""
    op.drop_index("ix_otp_verifications_expires_at", table_name="otp_verifications")
    op.drop_table("otp_verifications")
