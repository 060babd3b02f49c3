"""Decimal currency helpers."""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError

CENT = Decimal("0.01")


def to_decimal_2(raw: Any, *, field: str = "amount") -> Decimal:
    """Coerce ``raw`` to a two-decimal ``Decimal`` (half-up)."""

    if isinstance(raw, float):
        # str() first so 0.1 does not become 0.1000000000000000055...
        raw = str(raw)
    try:
        d = Decimal(raw) if not isinstance(raw, Decimal) else raw
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a decimal number, got {raw!r}") from None
    if not d.is_finite():
        raise ValidationError(f"{field} must be a finite number, got {raw!r}")
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def split_installments(total: Decimal, count: int) -> list[Decimal]:
    """Split ``total`` into ``count`` cent amounts that sum to ``total`` exactly.

    Each installment gets ``total / count`` truncated to cents; the last one
    absorbs the remainder. Truncating (instead of rounding) keeps the last
    installment at least as large as the others, so it never goes negative.
    """

    if count < 1:
        raise ValidationError(f"installments must be at least 1, got {count}")
    total = total.quantize(CENT, rounding=ROUND_HALF_UP)
    share = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    amounts = [share] * count
    amounts[-1] = total - share * (count - 1)
    return amounts


__all__ = [
    "CENT",
    "split_installments",
    "to_decimal_2",
]
