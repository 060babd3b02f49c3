"""Listing and dashboard summaries over stored occurrences.

``list_obligations`` backs the filtered list view; ``summarize`` computes the
four dashboard buckets (pending, overdue, settled this month, due soon) from
an already-loaded list and touches no store.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator

from .dates import month_bounds
from .models import Obligation, Status
from .status import OVERDUE, is_overdue
from .store import ListingStore

StatusFilter = Literal["pending", "paid", "received", "canceled", "overdue"]


class ListFilters(BaseModel):
    """Filters for :func:`list_obligations`; unset fields match everything."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    status: StatusFilter | None = None
    category: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> ListFilters:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self


def list_obligations(
    store: ListingStore, filters: ListFilters | None = None, *, today: date
) -> list[Obligation]:
    """Return matching occurrences ordered by due date.

    ``status="overdue"`` selects pending occurrences due before ``today``.
    """

    filters = filters or ListFilters()
    statuses: list[Status] | None = None
    due_before: date | None = None
    if filters.status == OVERDUE:
        statuses = [Status.PENDING]
        due_before = today
    elif filters.status is not None:
        statuses = [Status(filters.status)]

    return store.select_filtered(
        statuses=statuses,
        category=filters.category or None,
        due_from=filters.date_from,
        due_to=filters.date_to,
        due_before=due_before,
        search=filters.search or None,
    )


@dataclass(slots=True)
class Bucket:
    count: int = 0
    total: Decimal = field(default_factory=lambda: Decimal("0.00"))

    def add(self, amount: Decimal) -> None:
        self.count += 1
        self.total += amount


@dataclass(slots=True)
class Summary:
    pending: Bucket = field(default_factory=Bucket)
    overdue: Bucket = field(default_factory=Bucket)
    settled_this_month: Bucket = field(default_factory=Bucket)
    due_soon: Bucket = field(default_factory=Bucket)


def summarize(
    obligations: Iterable[Obligation], *, today: date, due_soon_days: int = 3
) -> Summary:
    """Aggregate counts and totals per dashboard bucket.

    Buckets overlap on purpose: an overdue occurrence is also pending.
    Settled occurrences count in ``settled_this_month`` when their
    ``payment_date`` falls in ``today``'s month, totalled by ``paid_amount``
    (or the scheduled amount when none was recorded).
    """

    if due_soon_days < 0:
        raise ValueError(f"due_soon_days must be >= 0, got {due_soon_days}")
    month_start, month_end = month_bounds(today)
    soon_end = today + timedelta(days=due_soon_days)

    summary = Summary()
    for ob in obligations:
        if ob.status is Status.PENDING:
            summary.pending.add(ob.amount)
            if is_overdue(ob, today):
                summary.overdue.add(ob.amount)
            elif ob.due_date <= soon_end:
                summary.due_soon.add(ob.amount)
        elif ob.status in (Status.PAID, Status.RECEIVED):
            if ob.payment_date and month_start <= ob.payment_date <= month_end:
                summary.settled_this_month.add(ob.paid_amount or ob.amount)
    return summary


__all__ = [
    "Bucket",
    "ListFilters",
    "Summary",
    "list_obligations",
    "summarize",
]
