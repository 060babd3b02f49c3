# ruff: noqa: I001
"""Occurrence store: the persistence seam of the engine.

The engine only needs seven point/range primitives from persistence, captured
by :class:`OccurrenceStore`. :class:`SqlAlchemyStore` implements them (plus
the filtered listing used by reports and the extension job) against the
``ob_obligations`` table owned by ``libs/db``.

Each call runs in its own short ``session_scope``; nothing spans calls, so
callers must not assume multi-statement atomicity. Driver failures surface as
:class:`~obligations.errors.StoreError` with the original message and the
SQLAlchemy exception chained as ``__cause__``. There are no retries here.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import date
from typing import Any, Protocol

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.client import session_scope
from db.models.ledger import ObObligation

from .errors import StoreError, ValidationError
from .logging_setup import get_logger
from .models import Kind, Obligation, OccurrenceType, Status

_logger = get_logger("obligations.store")

_COLUMNS: tuple[str, ...] = tuple(Obligation.__dataclass_fields__)


class OccurrenceStore(Protocol):
    """Read/write primitives the engine requires from persistence."""

    def insert(self, records: Sequence[Obligation]) -> list[str]: ...

    def select_by_id(self, obligation_id: str) -> Obligation | None: ...

    def select_by_parent_and_due_date_gte(
        self, parent_id: str, due_date: date
    ) -> list[Obligation]: ...

    def select_by_parent_id(self, parent_id: str) -> list[Obligation]: ...

    def update_by_id(self, obligation_id: str, patch: Mapping[str, Any]) -> None: ...

    def update_by_ids(self, ids: Sequence[str], patch: Mapping[str, Any]) -> None: ...

    def delete_by_ids(self, ids: Sequence[str]) -> None: ...


class ListingStore(OccurrenceStore, Protocol):
    """Store that can also answer filtered list queries."""

    def select_filtered(
        self,
        *,
        statuses: Iterable[Status] | None = None,
        occurrence_types: Iterable[OccurrenceType] | None = None,
        category: str | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
        due_before: date | None = None,
        search: str | None = None,
    ) -> list[Obligation]: ...


def _row_to_obligation(row: ObObligation) -> Obligation:
    return Obligation.from_record({c: getattr(row, c) for c in _COLUMNS})


def _normalize_patch(patch: Mapping[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, value in patch.items():
        if key == "id" or key not in _COLUMNS:
            raise ValueError(f"not an updatable obligation column: {key!r}")
        # StrEnum members are str already; store the plain value.
        values[key] = value.value if isinstance(value, Kind | OccurrenceType | Status) else value
    return values


class SqlAlchemyStore:
    """``OccurrenceStore`` over ``ob_obligations``, scoped to one ledger kind.

    Payables and receivables share the table; every query here filters on
    ``kind`` so a payable id can never resolve through the receivable store.
    """

    def __init__(self, kind: Kind | str, *, database_url: str | None = None) -> None:
        self.kind = Kind(kind)
        self._database_url = database_url

    def __repr__(self) -> str:  # pragma: no cover - trivial repr
        return f"SqlAlchemyStore(kind={self.kind.value!r})"

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with session_scope(database_url=self._database_url) as session:
                yield session
        except SQLAlchemyError as e:
            _logger.error("store operation failed (kind=%s): %s", self.kind.value, e)
            raise StoreError(str(e)) from e

    # ---- writes -------------------------------------------------------------

    def insert(self, records: Sequence[Obligation]) -> list[str]:
        rows: list[ObObligation] = []
        for rec in records:
            if rec.kind != self.kind:
                raise ValidationError(
                    f"cannot insert a {rec.kind.value} record into the {self.kind.value} store"
                )
            rows.append(ObObligation(**rec.to_record()))
        if not rows:
            return []
        with self._session() as session:
            session.add_all(rows)
            session.flush()
        return [r.id for r in rows]

    def update_by_id(self, obligation_id: str, patch: Mapping[str, Any]) -> None:
        self.update_by_ids([obligation_id], patch)

    def update_by_ids(self, ids: Sequence[str], patch: Mapping[str, Any]) -> None:
        ids = list(ids)
        values = _normalize_patch(patch)
        if not ids or not values:
            return
        stmt = (
            update(ObObligation)
            .where(ObObligation.kind == self.kind.value, ObObligation.id.in_(ids))
            .values(**values, updated_at=func.now())
        )
        with self._session() as session:
            session.execute(stmt)

    def delete_by_ids(self, ids: Sequence[str]) -> None:
        ids = list(ids)
        if not ids:
            return
        stmt = delete(ObObligation).where(
            ObObligation.kind == self.kind.value, ObObligation.id.in_(ids)
        )
        with self._session() as session:
            session.execute(stmt)

    # ---- reads --------------------------------------------------------------

    def _select(self, *conditions: Any) -> list[Obligation]:
        stmt = (
            select(ObObligation)
            .where(ObObligation.kind == self.kind.value, *conditions)
            .order_by(ObObligation.due_date, ObObligation.installment_number, ObObligation.id)
        )
        with self._session() as session:
            return [_row_to_obligation(r) for r in session.scalars(stmt).all()]

    def select_by_id(self, obligation_id: str) -> Obligation | None:
        found = self._select(ObObligation.id == obligation_id)
        return found[0] if found else None

    def select_by_parent_id(self, parent_id: str) -> list[Obligation]:
        return self._select(ObObligation.parent_id == parent_id)

    def select_by_parent_and_due_date_gte(
        self, parent_id: str, due_date: date
    ) -> list[Obligation]:
        return self._select(
            ObObligation.parent_id == parent_id,
            ObObligation.due_date >= due_date,
        )

    def select_filtered(
        self,
        *,
        statuses: Iterable[Status] | None = None,
        occurrence_types: Iterable[OccurrenceType] | None = None,
        category: str | None = None,
        due_from: date | None = None,
        due_to: date | None = None,
        due_before: date | None = None,
        search: str | None = None,
    ) -> list[Obligation]:
        """List rows matching every provided filter, ordered by due date.

        ``due_from``/``due_to`` are inclusive; ``due_before`` is exclusive.
        ``search`` is a case-insensitive substring match on ``description``.
        """

        conds: list[Any] = []
        if statuses is not None:
            conds.append(ObObligation.status.in_([str(s) for s in statuses]))
        if occurrence_types is not None:
            conds.append(ObObligation.occurrence_type.in_([str(t) for t in occurrence_types]))
        if category:
            conds.append(ObObligation.category == category)
        if due_from is not None:
            conds.append(ObObligation.due_date >= due_from)
        if due_to is not None:
            conds.append(ObObligation.due_date <= due_to)
        if due_before is not None:
            conds.append(ObObligation.due_date < due_before)
        if search:
            conds.append(ObObligation.description.icontains(search.strip(), autoescape=True))
        return self._select(*conds)


__all__ = [
    "ListingStore",
    "OccurrenceStore",
    "SqlAlchemyStore",
]
