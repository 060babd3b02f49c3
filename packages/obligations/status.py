"""Status state machine for a single occurrence.

::

    pending --> paid | received   (settled; which one depends on the kind)
    pending --> canceled

``paid``, ``received`` and ``canceled`` are terminal. Transitions always
target exactly one occurrence and never propagate across its series.

"Overdue" is derived for display only: a pending occurrence due before today
is shown as overdue while its stored status stays ``pending``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from .amounts import to_decimal_2
from .errors import NotFoundError, TransitionError, ValidationError
from .logging_setup import get_logger
from .models import Kind, Obligation, Status
from .store import OccurrenceStore

_logger = get_logger("obligations.status")

OVERDUE = "overdue"

TRANSITIONS: dict[Status, frozenset[Status]] = {
    Status.PENDING: frozenset({Status.PAID, Status.RECEIVED, Status.CANCELED}),
    Status.PAID: frozenset(),
    Status.RECEIVED: frozenset(),
    Status.CANCELED: frozenset(),
}

_SETTLED_BY_KIND: dict[Kind, Status] = {
    Kind.PAYABLE: Status.PAID,
    Kind.RECEIVABLE: Status.RECEIVED,
}


def settled_status(kind: Kind | str) -> Status:
    return _SETTLED_BY_KIND[Kind(kind)]


def is_terminal(status: Status | str) -> bool:
    return not TRANSITIONS[Status(status)]


def check_transition(current: Status | str, target: Status | str, kind: Kind | str) -> None:
    current, target, kind = Status(current), Status(target), Kind(kind)
    if target not in TRANSITIONS[current]:
        raise TransitionError(
            f"Cannot change status from {current.value!r} to {target.value!r}"
        )
    if target in (Status.PAID, Status.RECEIVED) and target is not settled_status(kind):
        raise TransitionError(
            f"A {kind.value} obligation settles as {settled_status(kind).value!r}, "
            f"not {target.value!r}"
        )


def _load(store: OccurrenceStore, obligation_id: str) -> Obligation:
    ob = store.select_by_id(obligation_id)
    if ob is None:
        raise NotFoundError(obligation_id)
    return ob


def confirm_payment(
    store: OccurrenceStore,
    obligation_id: str,
    payment_date: date,
    amount: Decimal | str | float,
) -> Obligation:
    """Settle one pending occurrence (``paid`` or ``received`` by kind).

    Records ``payment_date`` and ``paid_amount``, which may differ from the
    scheduled amount. Returns the occurrence as it now stands.
    """

    paid_amount = to_decimal_2(amount, field="paid amount")
    if paid_amount <= 0:
        raise ValidationError(f"paid amount must be positive, got {paid_amount}")
    if not isinstance(payment_date, date):
        raise ValidationError(f"payment_date must be a date, got {payment_date!r}")

    ob = _load(store, obligation_id)
    target = settled_status(ob.kind)
    check_transition(ob.status, target, ob.kind)

    changes: dict[str, Any] = {
        "status": target,
        "payment_date": payment_date,
        "paid_amount": paid_amount,
    }
    store.update_by_id(ob.id, changes)
    _logger.info(
        "%s %s marked %s on %s (%s)",
        ob.kind.value,
        ob.id,
        target.value,
        payment_date.isoformat(),
        paid_amount,
    )
    return ob.evolve(**changes)


def cancel_obligation(store: OccurrenceStore, obligation_id: str) -> Obligation:
    """Move one pending occurrence to ``canceled``."""

    ob = _load(store, obligation_id)
    check_transition(ob.status, Status.CANCELED, ob.kind)
    store.update_by_id(ob.id, {"status": Status.CANCELED})
    _logger.info("%s %s canceled", ob.kind.value, ob.id)
    return ob.evolve(status=Status.CANCELED)


def is_overdue(ob: Obligation, today: date) -> bool:
    return ob.status is Status.PENDING and ob.due_date < today


def display_status(ob: Obligation, today: date) -> str:
    """Stored status, or ``"overdue"`` for a pending occurrence past due."""

    return OVERDUE if is_overdue(ob, today) else ob.status.value


__all__ = [
    "OVERDUE",
    "TRANSITIONS",
    "cancel_obligation",
    "check_transition",
    "confirm_payment",
    "display_status",
    "is_overdue",
    "is_terminal",
    "settled_status",
]
