from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from obligations.api import dashboard, upcoming
from obligations.models import Kind, Obligation, OccurrenceType, Status
from obligations.reports import ListFilters, list_obligations, summarize
from obligations.series import create_series
from obligations.status import cancel_obligation, confirm_payment

TODAY = date(2024, 3, 10)


def _ob(oid, due, amount="100.00", status=Status.PENDING, **extra):
    return Obligation(
        id=oid,
        kind=Kind.PAYABLE,
        counterpart_id="sup",
        description=extra.pop("description", f"item {oid}"),
        category=extra.pop("category", "General"),
        amount=Decimal(amount),
        issue_date=date(2024, 1, 1),
        due_date=due,
        occurrence_type=OccurrenceType.UNICA,
        status=status,
        **extra,
    )


def test_summary_buckets():
    rows = [
        _ob("late", date(2024, 3, 1), "50.00"),
        _ob("today", date(2024, 3, 10), "20.00"),
        _ob("soon", date(2024, 3, 13), "30.00"),
        _ob("later", date(2024, 3, 14), "40.00"),
        _ob(
            "paid-now",
            date(2024, 2, 1),
            "70.00",
            status=Status.PAID,
            payment_date=date(2024, 3, 2),
            paid_amount=Decimal("75.00"),
        ),
        _ob(
            "paid-before",
            date(2024, 2, 1),
            "80.00",
            status=Status.PAID,
            payment_date=date(2024, 2, 28),
            paid_amount=Decimal("80.00"),
        ),
        _ob("gone", date(2024, 3, 11), status=Status.CANCELED),
    ]

    s = summarize(rows, today=TODAY)

    assert (s.pending.count, s.pending.total) == (4, Decimal("140.00"))
    assert (s.overdue.count, s.overdue.total) == (1, Decimal("50.00"))
    assert (s.due_soon.count, s.due_soon.total) == (2, Decimal("50.00"))
    assert (s.settled_this_month.count, s.settled_this_month.total) == (1, Decimal("75.00"))


def test_settled_without_paid_amount_falls_back_to_scheduled_amount():
    row = _ob("r", date(2024, 3, 1), "12.34", status=Status.RECEIVED, payment_date=TODAY)

    assert summarize([row], today=TODAY).settled_this_month.total == Decimal("12.34")


def test_due_soon_window_is_configurable():
    rows = [_ob("a", date(2024, 3, 17)), _ob("b", date(2024, 3, 18))]

    assert summarize(rows, today=TODAY, due_soon_days=7).due_soon.count == 1
    assert summarize(rows, today=TODAY, due_soon_days=0).due_soon.count == 0


def test_empty_summary_is_zero():
    s = summarize([], today=TODAY)

    assert s.pending.count == 0
    assert s.pending.total == Decimal("0.00")


def test_list_filters_reject_inverted_ranges_and_unknown_status():
    with pytest.raises(PydanticValidationError):
        ListFilters(date_from=date(2024, 2, 1), date_to=date(2024, 1, 1))
    with pytest.raises(PydanticValidationError):
        ListFilters(status="late")


def _seed(store):
    rent = create_series(
        store,
        {
            "kind": "payable",
            "counterpart_id": "landlord",
            "description": "Aluguel sala",
            "category": "Rent",
            "amount": "2000",
            "issue_date": "2024-01-01",
            "due_date": "2024-01-05",
            "occurrence_type": "mensal",
            "due_day": 5,
        },
        horizon=4,
    )
    power = create_series(
        store,
        {
            "kind": "payable",
            "counterpart_id": "utility",
            "description": "Energia",
            "category": "Utilities",
            "amount": "310.45",
            "issue_date": "2024-01-01",
            "due_date": "2024-03-12",
        },
    )
    return rent, power


def test_list_obligations_by_status_category_range_and_search(payables):
    rent, power = _seed(payables)
    confirm_payment(payables, rent[0].id, date(2024, 1, 5), "2000")
    cancel_obligation(payables, rent[3].id)

    overdue = list_obligations(payables, ListFilters(status="overdue"), today=TODAY)
    assert [ob.id for ob in overdue] == [rent[1].id, rent[2].id]

    paid = list_obligations(payables, ListFilters(status="paid"), today=TODAY)
    assert [ob.id for ob in paid] == [rent[0].id]

    utilities = list_obligations(payables, ListFilters(category="Utilities"), today=TODAY)
    assert [ob.id for ob in utilities] == [power[0].id]

    march = list_obligations(
        payables,
        ListFilters(date_from=date(2024, 3, 1), date_to=date(2024, 3, 31)),
        today=TODAY,
    )
    assert [ob.id for ob in march] == [rent[2].id, power[0].id]

    found = list_obligations(payables, ListFilters(search="ALUGUEL"), today=TODAY)
    assert len(found) == 4


def test_search_treats_wildcards_literally(payables):
    _seed(payables)

    assert list_obligations(payables, ListFilters(search="%"), today=TODAY) == []


def test_ledgers_are_isolated(payables, receivables):
    _seed(payables)

    assert list_obligations(receivables, today=TODAY) == []
    assert len(list_obligations(payables, today=TODAY)) == 5


def test_dashboard_and_upcoming_read_through_the_store(payables):
    rent, power = _seed(payables)

    s = dashboard(payables, today=TODAY)
    assert s.overdue.count == 3
    assert (s.due_soon.count, s.due_soon.total) == (1, Decimal("310.45"))

    assert [ob.id for ob in upcoming(payables, today=TODAY, days=30)] == [
        power[0].id,
        rent[3].id,
    ]
