"""Calendar helpers shared by the series generator and the extension job.

All arithmetic is on :class:`datetime.date`, whose natural ordering is the
chronological ordering the scope resolver relies on.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date
from typing import Any

from .errors import ValidationError


def clamp_day(year: int, month: int, day: int) -> date:
    """Return ``year-month-day``, pulling ``day`` back to the month's last day."""

    last_day = monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months keeping its day when the month allows.

    ``2024-01-31`` plus one month is ``2024-02-29``.
    """

    if months == 0:
        return start
    year = start.year + (start.month - 1 + months) // 12
    month = (start.month - 1 + months) % 12 + 1
    return clamp_day(year, month, start.day)


def shift_to_due_day(anchor: date, months: int, due_day: int) -> date:
    """Move ``anchor``'s month by ``months`` and force the day to ``due_day``.

    The shift is computed on the month alone, so a short intermediate month
    never drags later members off their due day.
    """

    if not 1 <= due_day <= 31:
        raise ValidationError(f"due_day must be between 1 and 31, got {due_day}")
    first = add_months(date(anchor.year, anchor.month, 1), months)
    return clamp_day(first.year, first.month, due_day)


def month_bounds(day: date) -> tuple[date, date]:
    """First and last calendar day of ``day``'s month."""

    return date(day.year, day.month, 1), clamp_day(day.year, day.month, 31)


def parse_iso_date(raw: Any, *, field: str = "date") -> date:
    """Parse ``YYYY-MM-DD`` (or pass a ``date`` through)."""

    if isinstance(raw, date):
        return raw
    s = str(raw or "").strip()
    try:
        return date.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD), got {raw!r}") from None


__all__ = [
    "add_months",
    "clamp_day",
    "month_bounds",
    "parse_iso_date",
    "shift_to_due_day",
]
