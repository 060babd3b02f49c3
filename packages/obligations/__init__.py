"""Public interface for the ``obligations`` package.

Re-exports the engine operations and the public models/errors as the stable
import surface. There is no runtime logic here, only symbol re-exports.
"""

from .api import (
    apply_bulk_delete,
    apply_bulk_edit,
    cancel_obligation,
    confirm_payment,
    create_series,
    dashboard,
    display_status,
    extend_recurring_series,
    generate_series,
    list_obligations,
    open_store,
    resolve_scope,
    summarize,
    upcoming,
)
from .errors import (
    NotFoundError,
    ObligationError,
    PartialSeriesError,
    StoreError,
    TransitionError,
    ValidationError,
)
from .models import (
    InstallmentSpec,
    Kind,
    Obligation,
    ObligationPatch,
    OccurrenceType,
    OneTimeSpec,
    RecurringSpec,
    Scope,
    SeriesSpec,
    Status,
)
from .reports import ListFilters, Summary
from .store import ListingStore, OccurrenceStore, SqlAlchemyStore

__all__ = [
    # API
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
    # Models / types
    "InstallmentSpec",
    "Kind",
    "ListFilters",
    "Obligation",
    "ObligationPatch",
    "OccurrenceType",
    "OneTimeSpec",
    "RecurringSpec",
    "Scope",
    "SeriesSpec",
    "Status",
    "Summary",
    # Store
    "ListingStore",
    "OccurrenceStore",
    "SqlAlchemyStore",
    # Errors
    "NotFoundError",
    "ObligationError",
    "PartialSeriesError",
    "StoreError",
    "TransitionError",
    "ValidationError",
]
