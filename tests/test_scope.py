from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from obligations.errors import NotFoundError, ValidationError
from obligations.models import ObligationPatch, Scope
from obligations.scope import apply_bulk_delete, apply_bulk_edit, resolve_scope
from obligations.series import create_series

from tests.helpers.memory_store import MemoryStore


def _monthly_series(store):
    return create_series(
        store,
        {
            "kind": "payable",
            "counterpart_id": "sup-1",
            "description": "Internet",
            "category": "Utilities",
            "amount": "120.00",
            "issue_date": "2024-01-01",
            "due_date": "2024-01-05",
            "occurrence_type": "mensal",
            "due_day": 5,
        },
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def series(store):
    return _monthly_series(store)


def test_single_is_always_the_target(store, series):
    for ob in (series[0], series[6], series[11]):
        assert resolve_scope(store, ob, Scope.SINGLE) == [ob.id]


def test_following_from_fourth_record_returns_fourth_through_twelfth(store, series):
    ids = resolve_scope(store, series[3], "following")

    assert ids == [ob.id for ob in series[3:]]
    assert len(ids) == 9


def test_following_from_head_covers_the_whole_series(store, series):
    assert resolve_scope(store, series[0], Scope.FOLLOWING) == [ob.id for ob in series]


def test_all_from_any_member_covers_head_and_children(store, series):
    ids = resolve_scope(store, series[7], Scope.ALL)

    assert ids[0] == series[0].id
    assert sorted(ids) == sorted(ob.id for ob in series)


def test_target_may_be_given_by_id(store, series):
    assert resolve_scope(store, series[10].id, "following") == [series[10].id, series[11].id]


def test_following_excludes_other_series(store, series):
    other = _monthly_series(store)

    ids = resolve_scope(store, series[9], Scope.FOLLOWING)

    assert set(ids).isdisjoint(ob.id for ob in other)
    assert ids == [ob.id for ob in series[9:]]


def test_one_time_obligation_resolves_to_itself_for_every_scope(store):
    (ob,) = create_series(
        store,
        {
            "kind": "payable",
            "counterpart_id": "sup-2",
            "description": "Repair",
            "category": "Maintenance",
            "amount": "50",
            "issue_date": "2024-01-01",
            "due_date": "2024-02-01",
        },
    )
    for scope in Scope:
        assert resolve_scope(store, ob, scope) == [ob.id]


@pytest.mark.parametrize("scope", [Scope.FOLLOWING, Scope.ALL])
def test_missing_head_falls_back_to_single(store, series, scope):
    store.delete_by_ids([series[0].id])

    assert resolve_scope(store, series[5], scope) == [series[5].id]


def test_missing_target_raises_not_found(store, series):
    store.delete_by_ids([series[2].id])

    with pytest.raises(NotFoundError) as exc_info:
        resolve_scope(store, series[2], Scope.ALL)
    assert exc_info.value.obligation_id == series[2].id


def test_stale_target_copy_is_reread_from_store(store, series):
    # A caller still holding the old due date must not widen the selection.
    store.update_by_id(series[3].id, {"due_date": date(2024, 9, 30)})

    ids = resolve_scope(store, series[3], Scope.FOLLOWING)

    assert ids == [series[3].id] + [ob.id for ob in series[9:]]


def test_resolution_is_idempotent(store, series):
    first = resolve_scope(store, series[4], Scope.FOLLOWING)
    second = resolve_scope(store, series[4], Scope.FOLLOWING)

    assert first == second


# ---- bulk edit / delete ---------------------------------------------------------


def test_following_edit_changes_amount_from_the_target_onwards(store, series):
    ids = apply_bulk_edit(store, series[5], {"amount": "150"}, Scope.FOLLOWING)

    assert len(ids) == 7
    amounts = [store.rows[ob.id].amount for ob in series]
    assert amounts[:5] == [Decimal("120.00")] * 5
    assert amounts[5:] == [Decimal("150.00")] * 7
    assert store.writes[-1] == ("update", tuple(ids))


def test_all_edit_updates_every_member(store, series):
    apply_bulk_edit(store, series[3], {"category": "Telecom", "notes": "renegotiated"}, "all")

    assert {store.rows[ob.id].category for ob in series} == {"Telecom"}
    assert {store.rows[ob.id].notes for ob in series} == {"renegotiated"}


def test_due_date_can_change_on_a_single_occurrence(store, series):
    apply_bulk_edit(store, series[2], {"due_date": "2024-03-08"}, Scope.SINGLE)

    assert store.rows[series[2].id].due_date == date(2024, 3, 8)


def test_due_date_change_across_many_occurrences_is_rejected(store, series):
    writes_before = list(store.writes)

    with pytest.raises(ValidationError, match="due_date"):
        apply_bulk_edit(store, series[2], {"due_date": "2024-03-08"}, Scope.FOLLOWING)
    assert store.writes == writes_before


def test_due_day_change_moves_every_selected_due_date(store, series):
    ids = apply_bulk_edit(store, series[3], {"due_day": 31}, Scope.FOLLOWING)

    assert ids == [ob.id for ob in series[3:]]
    moved = [store.rows[oid] for oid in ids]
    assert {ob.due_day for ob in moved} == {31}
    assert [ob.due_date for ob in moved[:3]] == [
        date(2024, 4, 30),
        date(2024, 5, 31),
        date(2024, 6, 30),
    ]
    assert store.rows[series[2].id].due_date == date(2024, 3, 5)
    assert store.rows[series[2].id].due_day == 5


def test_due_day_change_on_the_sql_store(payables):
    series = _monthly_series(payables)

    apply_bulk_edit(payables, series[5], {"due_day": 20, "notes": "moved"}, Scope.ALL)

    rows = [payables.select_by_id(ob.id) for ob in series]
    assert {(ob.due_date.day, ob.due_day, ob.notes) for ob in rows} == {(20, 20, "moved")}
    assert [ob.due_date.month for ob in rows] == list(range(1, 13))


def test_empty_or_unknown_patches_are_rejected(store, series):
    with pytest.raises(ValidationError, match="empty"):
        apply_bulk_edit(store, series[0], {}, Scope.ALL)
    with pytest.raises(ValidationError, match="status"):
        apply_bulk_edit(store, series[0], {"status": "paid"}, Scope.SINGLE)
    with pytest.raises(ValidationError, match="Cannot clear required field"):
        apply_bulk_edit(store, series[0], {"description": None}, Scope.SINGLE)
    writes_before = list(store.writes)
    with pytest.raises(ValidationError, match="Cannot clear required field"):
        apply_bulk_edit(store, series[0], ObligationPatch(description=None), Scope.ALL)
    assert store.writes == writes_before


def test_edit_on_missing_target_mutates_nothing(store, series):
    store.delete_by_ids([series[1].id])
    writes_before = list(store.writes)

    with pytest.raises(NotFoundError):
        apply_bulk_edit(store, series[1].id, {"amount": "10"}, Scope.ALL)
    assert store.writes == writes_before


def test_delete_following_leaves_earlier_members(store, series):
    deleted = apply_bulk_delete(store, series[8], Scope.FOLLOWING)

    assert deleted == [ob.id for ob in series[8:]]
    assert sorted(store.rows) == sorted(ob.id for ob in series[:8])


def test_delete_all_removes_the_series(store, series):
    apply_bulk_delete(store, series[4], Scope.ALL)

    assert store.rows == {}


def test_sqlalchemy_store_supports_scoped_edit_and_delete(payables):
    series = _monthly_series(payables)

    apply_bulk_edit(payables, series[3], {"amount": "130.50"}, Scope.FOLLOWING)
    apply_bulk_delete(payables, series[10], Scope.SINGLE)

    remaining = payables.select_by_parent_id(series[0].id)
    assert len(remaining) == 10
    assert payables.select_by_id(series[2].id).amount == Decimal("120.00")
    assert payables.select_by_id(series[3].id).amount == Decimal("130.50")
    assert payables.select_by_id(series[10].id) is None
    assert resolve_scope(payables, series[9], Scope.FOLLOWING) == [
        series[9].id,
        series[11].id,
    ]
