"""Series generation: turn one creation spec into dated occurrences.

:func:`generate_series` is pure. It returns the whole batch, head first, with
ids already assigned so children carry ``parent_id = head.id`` before anything
touches the store. :func:`create_series` persists such a batch in two steps
(head, then children) and removes the head again when the children cannot be
written. :func:`extend_recurring_series` tops up recurring series whose
scheduled horizon is about to run out.
"""

from __future__ import annotations

import uuid
from collections import defaultdict
from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from .amounts import split_installments
from .dates import add_months, shift_to_due_day
from .errors import PartialSeriesError, StoreError, ValidationError
from .logging_setup import get_logger
from .models import (
    RECURRING_TYPES,
    InstallmentSpec,
    Obligation,
    OccurrenceType,
    OneTimeSpec,
    RecurringSpec,
    SeriesSpec,
    Status,
    parse_series_spec,
)
from .store import ListingStore, OccurrenceStore

_logger = get_logger("obligations.series")

# Business rule: recurring (non-installment) series are scheduled 12
# occurrences ahead regardless of their period.
RECURRING_HORIZON = 12

INSTALLMENT_LABEL = "{description} - {number:02d} de {total:02d}"


def _new_id() -> str:
    return str(uuid.uuid4())


def installment_description(description: str, number: int, total: int) -> str:
    return INSTALLMENT_LABEL.format(description=description, number=number, total=total)


def _base_fields(spec: SeriesSpec) -> dict[str, Any]:
    return {
        "kind": spec.kind,
        "counterpart_id": spec.counterpart_id,
        "category": spec.category,
        "issue_date": spec.issue_date,
        "occurrence_type": spec.occurrence,
        "payment_method": spec.payment_method,
        "notes": spec.notes,
        "invoice_number": spec.invoice_number,
        "created_by": spec.created_by,
        "status": Status.PENDING,
    }


def generate_series(
    spec: Mapping[str, Any] | SeriesSpec,
    *,
    horizon: int = RECURRING_HORIZON,
    id_factory: Callable[[], str] = _new_id,
) -> list[Obligation]:
    """Build every occurrence a creation request implies, head first.

    - ``unica``: one occurrence due exactly on ``due_date``.
    - ``parcelada``: ``installments`` monthly occurrences; ``amount`` is the
      total and is split per :func:`~obligations.amounts.split_installments`.
    - ``mensal``/``trimestral``/``semestral``/``anual``: ``horizon``
      occurrences 1/3/6/12 months apart, each with the full amount.

    For every series type the n-th member (0-based) falls in ``due_date``'s
    month shifted by ``n * step`` months, on ``due_day`` clamped to the
    month's length.

    Raises :class:`~obligations.errors.ValidationError` before producing
    anything when the input is incomplete for its ``occurrence_type``.
    """

    if horizon < 1:
        raise ValidationError(f"horizon must be at least 1, got {horizon}")
    parsed = parse_series_spec(spec)
    base = _base_fields(parsed)

    if isinstance(parsed, OneTimeSpec):
        return [
            Obligation(
                id=id_factory(),
                description=parsed.description,
                amount=parsed.amount,
                due_date=parsed.due_date,
                **base,
            )
        ]

    if isinstance(parsed, InstallmentSpec):
        count = parsed.installments
        amounts = split_installments(parsed.amount, count)
    else:
        assert isinstance(parsed, RecurringSpec)
        count = horizon
        amounts = [parsed.amount] * count

    step = parsed.occurrence.month_step
    head_id = id_factory()
    batch: list[Obligation] = []
    for i in range(count):
        number = i + 1
        if isinstance(parsed, InstallmentSpec):
            extra: dict[str, Any] = {
                "description": installment_description(parsed.description, number, count),
                "installment_number": number,
                "total_installments": count,
            }
        else:
            extra = {"description": parsed.description}
        batch.append(
            Obligation(
                id=head_id if i == 0 else id_factory(),
                parent_id=None if i == 0 else head_id,
                amount=amounts[i],
                due_date=shift_to_due_day(parsed.due_date, i * step, parsed.due_day),
                due_day=parsed.due_day,
                **extra,
                **base,
            )
        )
    return batch


def create_series(
    store: OccurrenceStore,
    spec: Mapping[str, Any] | SeriesSpec,
    *,
    horizon: int = RECURRING_HORIZON,
    id_factory: Callable[[], str] = _new_id,
) -> list[Obligation]:
    """Generate a series and persist it: the head first, then its children.

    The store gives no cross-call atomicity, so a failed child insert leaves a
    lone head behind. That head is deleted again and the original
    :class:`~obligations.errors.StoreError` is re-raised. When the cleanup
    itself fails, :class:`~obligations.errors.PartialSeriesError` names the
    orphaned head so the caller can repair it.
    """

    batch = generate_series(spec, horizon=horizon, id_factory=id_factory)
    head, children = batch[0], batch[1:]

    store.insert([head])
    if children:
        try:
            store.insert(children)
        except StoreError as insert_err:
            _logger.warning(
                "child insert failed for series %s (%d children); removing head",
                head.id,
                len(children),
            )
            try:
                store.delete_by_ids([head.id])
            except StoreError as cleanup_err:
                _logger.error("could not remove orphaned head %s: %s", head.id, cleanup_err)
                raise PartialSeriesError(
                    head.id,
                    f"series head {head.id} was stored but its children were not "
                    f"({insert_err}); removing the head also failed ({cleanup_err})",
                ) from cleanup_err
            raise

    _logger.info(
        "created %s %s series %s with %d occurrence(s)",
        head.kind.value,
        head.occurrence_type.value,
        head.id,
        len(batch),
    )
    return batch


def extend_recurring_series(
    store: ListingStore,
    *,
    today: date,
    lookahead_months: int = 1,
    horizon: int = RECURRING_HORIZON,
    id_factory: Callable[[], str] = _new_id,
) -> list[Obligation]:
    """Schedule ``horizon`` more occurrences for series about to run dry.

    Pending recurring occurrences are grouped by series. When a series' latest
    pending due date is on or before ``today + lookahead_months``, new members
    continue its period from that date. They copy the latest member's amount
    and descriptive fields, get ``issue_date = today``, and link to the same
    head. Installment and one-time obligations are never extended.

    Returns the inserted occurrences (oldest series first).
    """

    if horizon < 1:
        raise ValidationError(f"horizon must be at least 1, got {horizon}")
    pending = store.select_filtered(
        statuses=[Status.PENDING], occurrence_types=RECURRING_TYPES
    )
    by_series: defaultdict[str, list[Obligation]] = defaultdict(list)
    for ob in pending:
        by_series[ob.series_id].append(ob)

    cutoff = add_months(today, lookahead_months)
    generated: list[Obligation] = []
    for series_id, members in by_series.items():
        latest = max(members, key=lambda o: o.due_date)
        if latest.due_date > cutoff:
            continue
        step = OccurrenceType(latest.occurrence_type).month_step
        for i in range(1, horizon + 1):
            if latest.due_day:
                due = shift_to_due_day(latest.due_date, i * step, latest.due_day)
            else:
                due = add_months(latest.due_date, i * step)
            generated.append(
                latest.evolve(
                    id=id_factory(),
                    parent_id=series_id,
                    due_date=due,
                    issue_date=today,
                    status=Status.PENDING,
                    payment_date=None,
                    paid_amount=None,
                )
            )
        _logger.info(
            "extending series %s by %d occurrence(s) after %s",
            series_id,
            horizon,
            latest.due_date.isoformat(),
        )

    if generated:
        store.insert(generated)
    return generated


__all__ = [
    "INSTALLMENT_LABEL",
    "RECURRING_HORIZON",
    "create_series",
    "extend_recurring_series",
    "generate_series",
    "installment_description",
]
