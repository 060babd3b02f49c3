"""Public API surface for the ``obligations`` package.

Calling layers (the CLI, a web handler) import from here. Every operation
takes the :class:`~obligations.store.OccurrenceStore` it works against, so
the engine itself never decides where data lives; :func:`open_store` builds
the default SQLAlchemy-backed one.
"""

from __future__ import annotations

from datetime import date, timedelta

from .models import Kind, Obligation
from .reports import ListFilters, Summary, list_obligations, summarize
from .scope import apply_bulk_delete, apply_bulk_edit, resolve_scope
from .series import create_series, extend_recurring_series, generate_series
from .status import cancel_obligation, confirm_payment, display_status
from .store import ListingStore, SqlAlchemyStore


def open_store(kind: Kind | str, *, database_url: str | None = None) -> SqlAlchemyStore:
    """Return the database-backed store for one ledger (payables or receivables)."""

    return SqlAlchemyStore(kind, database_url=database_url)


def dashboard(
    store: ListingStore, *, today: date, due_soon_days: int = 3
) -> Summary:
    """Summary buckets over every occurrence in ``store``."""

    return summarize(store.select_filtered(), today=today, due_soon_days=due_soon_days)


def upcoming(store: ListingStore, *, today: date, days: int) -> list[Obligation]:
    """Pending occurrences due between ``today`` and ``today + days`` inclusive."""

    return list_obligations(
        store,
        ListFilters(status="pending", date_from=today, date_to=today + timedelta(days=days)),
        today=today,
    )


__all__ = [
    "ListFilters",
    "Summary",
    "apply_bulk_delete",
    "apply_bulk_edit",
    "cancel_obligation",
    "confirm_payment",
    "create_series",
    "dashboard",
    "display_status",
    "extend_recurring_series",
    "generate_series",
    "list_obligations",
    "open_store",
    "resolve_scope",
    "summarize",
    "upcoming",
]
