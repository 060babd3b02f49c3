"""Bulk mutation resolver: which occurrences does an edit/delete touch?

Given the occurrence a user acted on and a :class:`~obligations.models.Scope`,
:func:`resolve_scope` returns the exact ids to mutate:

- ``single``    -> the occurrence itself;
- ``following`` -> it plus every series member due on or after it;
- ``all``       -> the series head plus every member.

The series is identified by ``parent_id`` (or the occurrence's own id when it
is the head). Broken linkage never widens or empties the result: when the
head cannot be found the resolver falls back to the single occurrence.

Selection and mutation are two separate store calls, so the id set is a
best-effort snapshot; rows inserted between the two phases are not included.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .dates import shift_to_due_day
from .errors import NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import Obligation, ObligationPatch, Scope, parse_patch
from .store import OccurrenceStore

_logger = get_logger("obligations.scope")


def _target_id(target: Obligation | str) -> str:
    return target.id if isinstance(target, Obligation) else str(target)


def _load_target(store: OccurrenceStore, target: Obligation | str) -> Obligation:
    target_id = _target_id(target)
    current = store.select_by_id(target_id)
    if current is None:
        raise NotFoundError(target_id)
    return current


def _unique(ids: list[str]) -> list[str]:
    return list(dict.fromkeys(ids))


def resolve_scope(
    store: OccurrenceStore, target: Obligation | str, scope: Scope | str
) -> list[str]:
    """Return the ids an edit/delete with ``scope`` must touch, never empty.

    ``target`` is re-read from the store so the answer reflects the stored
    series linkage and due date, not a possibly stale copy held by the
    caller. Raises :class:`~obligations.errors.NotFoundError` when it no
    longer exists.
    """

    scope = Scope(scope)
    current = _load_target(store, target)
    if scope is Scope.SINGLE:
        return [current.id]

    head_id = current.series_id
    head = current if head_id == current.id else store.select_by_id(head_id)
    if head is None:
        _logger.warning(
            "series head %s of %s is missing; %s scope falls back to single",
            head_id,
            current.id,
            scope.value,
        )
        return [current.id]

    if scope is Scope.FOLLOWING:
        members = store.select_by_parent_and_due_date_gte(head_id, current.due_date)
        return _unique([current.id, *(m.id for m in members)])

    members = store.select_by_parent_id(head_id)
    return _unique([head_id, *(m.id for m in members)])


def _realign_due_dates(
    store: OccurrenceStore, ids: list[str], changes: Mapping[str, Any]
) -> None:
    due_day = changes["due_day"]
    for oid in ids:
        current = store.select_by_id(oid)
        if current is None:
            continue
        new_due = shift_to_due_day(current.due_date, 0, due_day)
        store.update_by_id(oid, {**changes, "due_date": new_due})


def apply_bulk_edit(
    store: OccurrenceStore,
    target: Obligation | str,
    payload: Mapping[str, Any] | ObligationPatch,
    scope: Scope | str,
) -> list[str]:
    """Apply the same patch to every occurrence ``scope`` selects.

    ``due_date`` is positional within a series, so it may only be changed on
    a single occurrence. A new ``due_day`` moves each selected occurrence to
    that day within its own month. Returns the ids that were updated.
    """

    patch = parse_patch(payload)
    changes = patch.changes()
    if not changes:
        raise ValidationError("Edit payload is empty; nothing to update")

    ids = resolve_scope(store, target, scope)
    if "due_date" in changes and len(ids) > 1:
        raise ValidationError(
            "due_date can only be changed one occurrence at a time; use scope 'single'"
        )

    if "due_day" in changes and "due_date" not in changes:
        _realign_due_dates(store, ids, changes)
    else:
        store.update_by_ids(ids, changes)
    _logger.info(
        "edited %d occurrence(s) from %s (scope=%s, fields=%s)",
        len(ids),
        _target_id(target),
        Scope(scope).value,
        ",".join(sorted(changes)),
    )
    return ids


def apply_bulk_delete(
    store: OccurrenceStore, target: Obligation | str, scope: Scope | str
) -> list[str]:
    """Delete every occurrence ``scope`` selects; returns the deleted ids."""

    ids = resolve_scope(store, target, scope)
    store.delete_by_ids(ids)
    _logger.info(
        "deleted %d occurrence(s) from %s (scope=%s)",
        len(ids),
        _target_id(target),
        Scope(scope).value,
    )
    return ids


__all__ = [
    "apply_bulk_delete",
    "apply_bulk_edit",
    "resolve_scope",
]
