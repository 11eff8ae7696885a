"""create admission_applications

Revision ID: b8d2f3e4a5c6
Revises: a7c1e2d3f4b5
Create Date: 2026-10-17 09:30:00.000000

This migration:
1. Creates the admission_status and payment_status enum types
2. Creates the admission_applications table with its indexes
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b8d2f3e4a5c6"
down_revision: str | Sequence[str] | None = "a7c1e2d3f4b5"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


admission_status_enum = postgresql.ENUM(
    "PENDING",
    "UNDER_REVIEW",
    "APPROVED",
    "REJECTED",
    name="admission_status",
    create_type=False,
)

payment_status_enum = postgresql.ENUM(
    "PENDING",
    "COMPLETED",
    name="payment_status",
    create_type=False,
)


def upgrade() -> None:
    """Create admission_applications table."""
    admission_status_enum.create(op.get_bind(), checkfirst=True)
    payment_status_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "admission_applications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("application_id", sa.String(100), nullable=False, unique=True),
        # Student
        sa.Column("student_name", sa.String(200), nullable=False),
        sa.Column("date_of_birth", sa.String(20), nullable=True),
        sa.Column("gender", sa.String(20), nullable=True),
        sa.Column("class_applied", sa.String(20), nullable=False),
        sa.Column("previous_school", sa.String(200), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("aadhaar", sa.String(20), nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        # Parents
        sa.Column("father_name", sa.String(200), nullable=True),
        sa.Column("mother_name", sa.String(200), nullable=True),
        sa.Column("father_mobile", sa.String(20), nullable=True),
        sa.Column("mother_mobile", sa.String(20), nullable=True),
        sa.Column("email", sa.String(255), nullable=False),
        # Documents
        sa.Column("passport_photo_url", sa.String(1000), nullable=True),
        sa.Column("previous_marksheet_url", sa.String(1000), nullable=True),
        sa.Column("address_proof_url", sa.String(1000), nullable=True),
        # Review
        sa.Column("status", admission_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("document_checks", postgresql.JSON(), nullable=True),
        # Payment
        sa.Column("payment_status", payment_status_enum, nullable=False, server_default="PENDING"),
        sa.Column("payment_screenshot_url", sa.String(1000), nullable=True),
        # Audit
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )

    op.create_index("ix_admission_applications_status", "admission_applications", ["status"])
    op.create_index("ix_admission_applications_email", "admission_applications", ["email"])
    op.create_index(
        "ix_admission_applications_created_at", "admission_applications", ["created_at"]
    )


def downgrade() -> None:
    """Drop admission_applications table and its enum types."""
    op.drop_index("ix_admission_applications_created_at", table_name="admission_applications")
    op.drop_index("ix_admission_applications_email", table_name="admission_applications")
    op.drop_index("ix_admission_applications_status", table_name="admission_applications")
    op.drop_table("admission_applications")

    payment_status_enum.drop(op.get_bind(), checkfirst=True)
    admission_status_enum.drop(op.get_bind(), checkfirst=True)
