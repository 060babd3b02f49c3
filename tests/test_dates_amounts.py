from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from obligations.amounts import split_installments, to_decimal_2
from obligations.dates import add_months, month_bounds, parse_iso_date, shift_to_due_day
from obligations.errors import ValidationError


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 11, 15), 3, date(2025, 2, 15)),
        (date(2024, 3, 31), -1, date(2024, 2, 29)),
        (date(2024, 5, 5), 0, date(2024, 5, 5)),
    ],
)
def test_add_months_clamps_to_month_end(start, months, expected):
    assert add_months(start, months) == expected


def test_shift_to_due_day_does_not_inherit_an_earlier_clamp():
    assert shift_to_due_day(date(2024, 2, 29), 1, 31) == date(2024, 3, 31)
    assert shift_to_due_day(date(2024, 12, 10), 2, 30) == date(2025, 2, 28)


def test_shift_to_due_day_rejects_out_of_range_days():
    with pytest.raises(ValidationError, match="due_day"):
        shift_to_due_day(date(2024, 1, 1), 1, 0)


def test_month_bounds():
    assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_parse_iso_date():
    assert parse_iso_date("2024-07-01") == date(2024, 7, 1)
    with pytest.raises(ValidationError, match="ISO date"):
        parse_iso_date("01/07/2024", field="due_date")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("10", "10.00"), (0.1, "0.10"), ("2.005", "2.01"), (Decimal("3"), "3.00")],
)
def test_to_decimal_2(raw, expected):
    assert to_decimal_2(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", ["ten", None, "NaN", "Infinity"])
def test_to_decimal_2_rejects_non_numbers(raw):
    with pytest.raises(ValidationError):
        to_decimal_2(raw)


@pytest.mark.parametrize(
    ("total", "count"),
    [("1200.00", 12), ("100.00", 3), ("0.05", 3), ("1000.01", 7), ("10.00", 1)],
)
def test_split_installments_sums_exactly(total, count):
    parts = split_installments(Decimal(total), count)

    assert len(parts) == count
    assert sum(parts) == Decimal(total)
    assert all(p >= 0 for p in parts)
    assert len(set(parts[:-1])) <= 1
    assert parts[-1] >= parts[0]


def test_split_installments_rejects_zero_count():
    with pytest.raises(ValidationError):
        split_installments(Decimal("10"), 0)
