# ruff: noqa: I001
"""Obligation ledger table.

Revision ID: 0001_ob_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ob_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "ob_obligations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("counterpart_id", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("payment_method", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("invoice_number", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("occurrence_type", sa.String(), nullable=False),
        sa.Column("due_day", sa.Integer(), nullable=True),
        sa.Column("installment_number", sa.Integer(), nullable=True),
        sa.Column("total_installments", sa.Integer(), nullable=True),
        # No FK: members may outlive a deleted head.
        sa.Column("parent_id", sa.String(length=36), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column("paid_amount", sa.Numeric(18, 2), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("kind in ('payable','receivable')", name="ck_ob_kind"),
        sa.CheckConstraint(
            "occurrence_type in ('unica','mensal','trimestral','semestral','anual','parcelada')",
            name="ck_ob_occurrence_type",
        ),
        sa.CheckConstraint(
            "status in ('pending','paid','received','canceled')",
            name="ck_ob_status",
        ),
        sa.CheckConstraint(
            "due_day IS NULL OR (due_day >= 1 AND due_day <= 31)",
            name="ck_ob_due_day",
        ),
        sa.CheckConstraint(
            "(installment_number IS NULL AND total_installments IS NULL) OR "
            "(installment_number >= 1 AND installment_number <= total_installments)",
            name="ck_ob_installments",
        ),
    )
    op.create_index(
        "ix_ob_obligations_series",
        "ob_obligations",
        ["kind", "parent_id", "due_date"],
    )
    op.create_index(
        "ix_ob_obligations_kind_due_date",
        "ob_obligations",
        ["kind", "due_date"],
    )
    op.create_index("ix_ob_obligations_status", "ob_obligations", ["status"])


def downgrade() -> None:
    op.drop_index("ix_ob_obligations_status", table_name="ob_obligations")
    op.drop_index("ix_ob_obligations_kind_due_date", table_name="ob_obligations")
    op.drop_index("ix_ob_obligations_series", table_name="ob_obligations")
    op.drop_table("ob_obligations")
