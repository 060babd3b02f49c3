from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Core: ob_obligations
# ---------------------------


class ObObligation(Base):
    """One dated payable or receivable occurrence.

    Payables and receivables share this table and are told apart by ``kind``;
    series never cross kinds. ``parent_id`` is NULL on the head of a series
    and holds the head's id on every other member.
    """

    __tablename__ = "ob_obligations"

    # UUID strings assigned by the series generator before insert.
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    kind: Mapped[str] = mapped_column(String, nullable=False)
    # Supplier (payable) or client (receivable) reference; opaque here.
    counterpart_id: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False)
    payment_method: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    invoice_number: Mapped[str | None] = mapped_column(String, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    issue_date: Mapped[date] = mapped_column(Date, nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    occurrence_type: Mapped[str] = mapped_column(String, nullable=False)
    due_day: Mapped[int | None] = mapped_column(Integer, nullable=True)
    installment_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_installments: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Deliberately not a foreign key: members may outlive a deleted head and
    # the scope resolver falls back to the single row in that case.
    parent_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, server_default="pending")
    payment_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    paid_amount: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("kind in ('payable','receivable')", name="ck_ob_kind"),
        CheckConstraint(
            "occurrence_type in ('unica','mensal','trimestral','semestral','anual','parcelada')",
            name="ck_ob_occurrence_type",
        ),
        CheckConstraint(
            "status in ('pending','paid','received','canceled')",
            name="ck_ob_status",
        ),
        CheckConstraint(
            "due_day IS NULL OR (due_day >= 1 AND due_day <= 31)",
            name="ck_ob_due_day",
        ),
        CheckConstraint(
            (
                "(installment_number IS NULL AND total_installments IS NULL) OR "
                "(installment_number >= 1 AND installment_number <= total_installments)"
            ),
            name="ck_ob_installments",
        ),
        Index("ix_ob_obligations_series", "kind", "parent_id", "due_date"),
        Index("ix_ob_obligations_kind_due_date", "kind", "due_date"),
        Index("ix_ob_obligations_status", "status"),
    )


__all__ = [
    "Base",
    "ObObligation",
]
