"""Data models for ``obligations``.

Two families live here:

- :class:`Obligation`, an immutable view of one stored occurrence (a payable
  or receivable due on a given date), plus the small enums that describe it.
- Pydantic DTOs validating caller input: the tagged creation specs
  (:class:`OneTimeSpec`, :class:`RecurringSpec`, :class:`InstallmentSpec`)
  and the bulk-edit :class:`ObligationPatch`.

The creation specs are a discriminated union on ``occurrence_type`` so that
``due_day`` and ``installments`` are required exactly where the occurrence
type needs them, instead of being checked ad hoc.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, replace
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from .amounts import to_decimal_2
from .errors import ValidationError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Kind(StrEnum):
    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class OccurrenceType(StrEnum):
    UNICA = "unica"
    MENSAL = "mensal"
    TRIMESTRAL = "trimestral"
    SEMESTRAL = "semestral"
    ANUAL = "anual"
    PARCELADA = "parcelada"

    @property
    def is_recurring(self) -> bool:
        return self in _MONTH_STEPS

    @property
    def month_step(self) -> int:
        """Months between consecutive members (1 for installments)."""

        if self is OccurrenceType.PARCELADA:
            return 1
        try:
            return _MONTH_STEPS[self]
        except KeyError:
            raise ValueError(f"{self.value!r} does not repeat") from None


_MONTH_STEPS: dict[OccurrenceType, int] = {
    OccurrenceType.MENSAL: 1,
    OccurrenceType.TRIMESTRAL: 3,
    OccurrenceType.SEMESTRAL: 6,
    OccurrenceType.ANUAL: 12,
}

RECURRING_TYPES: tuple[OccurrenceType, ...] = tuple(_MONTH_STEPS)
_TYPE_VALUES = frozenset(t.value for t in OccurrenceType)


class Status(StrEnum):
    PENDING = "pending"
    PAID = "paid"
    RECEIVED = "received"
    CANCELED = "canceled"


class Scope(StrEnum):
    SINGLE = "single"
    FOLLOWING = "following"
    ALL = "all"


# ---------------------------------------------------------------------------
# Stored occurrence
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Obligation:
    """One dated payable or receivable occurrence.

    ``parent_id`` is ``None`` on the head of a series (and on one-time
    occurrences); every other member points at the head's ``id``.
    ``installment_number``/``total_installments`` are only set for
    ``parcelada`` series; ``payment_date``/``paid_amount`` only once the
    occurrence has been settled.
    """

    id: str
    kind: Kind
    counterpart_id: str
    description: str
    category: str
    amount: Decimal
    issue_date: date
    due_date: date
    occurrence_type: OccurrenceType
    status: Status = Status.PENDING
    due_day: int | None = None
    installment_number: int | None = None
    total_installments: int | None = None
    parent_id: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    invoice_number: str | None = None
    created_by: str | None = None
    payment_date: date | None = None
    paid_amount: Decimal | None = None

    @property
    def is_head(self) -> bool:
        return self.parent_id is None

    @property
    def series_id(self) -> str:
        """Id of the series head (the occurrence itself when it is the head)."""

        return self.parent_id or self.id

    def evolve(self, **changes: Any) -> Obligation:
        return replace(self, **changes)

    def to_record(self) -> dict[str, Any]:
        """Plain column mapping with enum members flattened to strings."""

        record = asdict(self)
        for key in ("kind", "occurrence_type", "status"):
            record[key] = str(record[key])
        return record

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Obligation:
        fields = {k: record[k] for k in cls.__dataclass_fields__ if k in record}
        fields["kind"] = Kind(fields["kind"])
        fields["occurrence_type"] = OccurrenceType(fields["occurrence_type"])
        fields["status"] = Status(fields.get("status") or Status.PENDING)
        return cls(**fields)


# ---------------------------------------------------------------------------
# Creation specs (tagged by occurrence_type)
# ---------------------------------------------------------------------------


class _SeriesSpecBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    kind: Kind
    counterpart_id: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    issue_date: date
    due_date: date
    payment_method: str | None = None
    notes: str | None = None
    invoice_number: str | None = None
    created_by: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_cents(cls, v: Any) -> Decimal:
        return to_decimal_2(v)

    @field_validator("payment_method", "notes", "invoice_number", "created_by")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v or None

    @property
    def occurrence(self) -> OccurrenceType:
        return OccurrenceType(self.occurrence_type)  # type: ignore[attr-defined]


class OneTimeSpec(_SeriesSpecBase):
    """A single occurrence due exactly on ``due_date``."""

    occurrence_type: Literal["unica"] = "unica"


class RecurringSpec(_SeriesSpecBase):
    """A fixed-length recurring series with identical amounts."""

    occurrence_type: Literal["mensal", "trimestral", "semestral", "anual"]
    due_day: int = Field(ge=1, le=31)


class InstallmentSpec(_SeriesSpecBase):
    """``amount`` is the total, split across ``installments`` monthly members."""

    occurrence_type: Literal["parcelada"]
    due_day: int = Field(ge=1, le=31)
    installments: int = Field(ge=1)


type SeriesSpec = OneTimeSpec | RecurringSpec | InstallmentSpec

_SPEC_ADAPTER: TypeAdapter[OneTimeSpec | RecurringSpec | InstallmentSpec] = TypeAdapter(
    Annotated[
        OneTimeSpec | RecurringSpec | InstallmentSpec,
        Field(discriminator="occurrence_type"),
    ]
)


def _format_pydantic_errors(exc: PydanticValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        # Drop the union tag (e.g. "parcelada") from the location path.
        loc = [str(p) for p in err.get("loc", ()) if str(p) not in _TYPE_VALUES]
        where = ".".join(loc) or "input"
        parts.append(f"{where}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_series_spec(data: Mapping[str, Any] | SeriesSpec) -> SeriesSpec:
    """Validate raw creation input into one of the tagged spec variants.

    The most common mistakes are reported with a targeted message before
    pydantic gets involved; anything else is flattened into a single
    human-readable :class:`~obligations.errors.ValidationError`.
    """

    if isinstance(data, OneTimeSpec | RecurringSpec | InstallmentSpec):
        return data

    raw = {k: v for k, v in dict(data).items() if v is not None}
    occ = str(raw.get("occurrence_type") or OccurrenceType.UNICA)
    if occ not in _TYPE_VALUES:
        raise ValidationError(f"Unknown occurrence_type: {occ!r}")
    raw["occurrence_type"] = occ

    if occ != OccurrenceType.UNICA and "due_day" not in raw:
        raise ValidationError(f"due_day is required for occurrence_type {occ!r}")
    if occ == OccurrenceType.UNICA:
        raw.pop("due_day", None)
        raw.pop("installments", None)
    elif occ == OccurrenceType.PARCELADA:
        installments = raw.get("installments")
        if installments is None:
            raise ValidationError("installments is required for occurrence_type 'parcelada'")
        try:
            if int(installments) < 1:
                raise ValidationError(f"installments must be at least 1, got {installments}")
        except (TypeError, ValueError):
            raise ValidationError(f"installments must be an integer, got {installments!r}") from None
    else:
        raw.pop("installments", None)

    try:
        return _SPEC_ADAPTER.validate_python(raw)
    except PydanticValidationError as e:
        raise ValidationError(_format_pydantic_errors(e)) from e


# ---------------------------------------------------------------------------
# Bulk edit payload
# ---------------------------------------------------------------------------


class ObligationPatch(BaseModel):
    """Fields a bulk edit may overwrite. Structural columns are not editable."""

    model_config = ConfigDict(extra="forbid", frozen=True, str_strip_whitespace=True)

    counterpart_id: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    category: str | None = Field(default=None, min_length=1)
    amount: Decimal | None = Field(default=None, gt=0)
    payment_method: str | None = None
    notes: str | None = None
    invoice_number: str | None = None
    issue_date: date | None = None
    due_date: date | None = None
    due_day: int | None = Field(default=None, ge=1, le=31)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_to_cents(cls, v: Any) -> Decimal | None:
        return None if v is None else to_decimal_2(v)

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually set (explicit ``None`` included)."""

        return self.model_dump(exclude_unset=True)


def parse_patch(payload: Mapping[str, Any] | ObligationPatch) -> ObligationPatch:
    if isinstance(payload, ObligationPatch):
        patch = payload
    else:
        try:
            patch = ObligationPatch.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise ValidationError(_format_pydantic_errors(e)) from e
    cleared = sorted(k for k, v in patch.changes().items() if v is None and k in _REQUIRED_COLUMNS)
    if cleared:
        raise ValidationError(f"Cannot clear required field(s): {', '.join(cleared)}")
    return patch


_REQUIRED_COLUMNS = frozenset(
    {"counterpart_id", "description", "category", "amount", "issue_date", "due_date"}
)


__all__ = [
    "RECURRING_TYPES",
    "InstallmentSpec",
    "Kind",
    "Obligation",
    "ObligationPatch",
    "OccurrenceType",
    "OneTimeSpec",
    "RecurringSpec",
    "Scope",
    "SeriesSpec",
    "Status",
    "parse_patch",
    "parse_series_spec",
]
