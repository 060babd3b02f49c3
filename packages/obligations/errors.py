"""Exception hierarchy for the obligation engine.

Every error raised on purpose by this package derives from
:class:`ObligationError`. Messages are written for humans: calling layers are
expected to surface ``str(exc)`` as-is.
"""

from __future__ import annotations


class ObligationError(Exception):
    """Base class for engine errors."""


class ValidationError(ObligationError):
    """Rejected input: a bad creation spec, edit payload, or amount."""


class TransitionError(ValidationError):
    """A status change outside the pending -> settled/canceled table."""


class NotFoundError(ObligationError):
    """The occurrence a mutation targets is not in the store."""

    def __init__(self, obligation_id: str) -> None:
        super().__init__(f"Obligation not found: {obligation_id!r}")
        self.obligation_id = obligation_id


class StoreError(ObligationError):
    """An underlying read/write failure, message preserved verbatim."""


class PartialSeriesError(StoreError):
    """Child insertion failed and the head could not be removed afterwards."""

    def __init__(self, head_id: str, message: str) -> None:
        super().__init__(message)
        self.head_id = head_id


__all__ = [
    "NotFoundError",
    "ObligationError",
    "PartialSeriesError",
    "StoreError",
    "TransitionError",
    "ValidationError",
]
