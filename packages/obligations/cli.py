# ruff: noqa: I001
"""CLI for the ``obligations`` package.

Each command has a callable handler (``cmd_create``, ``cmd_edit``, ...) that
returns a process exit code, plus a thin Typer wrapper. The root callback
loads a local ``.env`` with ``python-dotenv`` (never overriding the existing
environment), reads :class:`~obligations.config.Settings` and configures
logging before any command runs. Engine errors are reported as
``Error: <reason>`` on stderr with exit code 1.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

from .api import (
    apply_bulk_delete,
    apply_bulk_edit,
    cancel_obligation,
    confirm_payment,
    create_series,
    dashboard,
    display_status,
    extend_recurring_series,
    generate_series,
    list_obligations,
    open_store,
    resolve_scope,
)
from .config import Settings, load_settings
from .dates import parse_iso_date
from .errors import NotFoundError, ObligationError
from .logging_setup import configure_logging
from .models import Kind, Obligation, OccurrenceType, Scope
from .reports import ListFilters
from .store import SqlAlchemyStore
from .term_ui import select_scope

console = Console()


# ---- Small module-level helpers used by CLI commands -------------------------


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _store(kind: Kind | str, database_url: str | None, settings: Settings) -> SqlAlchemyStore:
    url = database_url or settings.database_url
    if not url:
        raise ObligationError("DATABASE_URL is not set; pass --database-url or set it in .env")
    return open_store(kind, database_url=url)


def _today(raw: str | None) -> date:
    return parse_iso_date(raw, field="today") if raw else date.today()


def _parse_assignments(assignments: Sequence[str]) -> dict[str, Any]:
    """Turn ``["field=value", ...]`` into a patch; an empty value clears the field."""

    patch: dict[str, Any] = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ObligationError(f"Expected field=value, got {item!r}")
        patch[key] = value.strip() or None
    return patch


def _print_batch(batch: Sequence[Obligation]) -> None:
    for ob in batch:
        print(f"{ob.id}\t{ob.due_date.isoformat()}\t{ob.amount}\t{ob.description}")


def _ask_scope(store: SqlAlchemyStore, obligation_id: str) -> Scope:
    target = store.select_by_id(obligation_id)
    if target is None:
        raise NotFoundError(obligation_id)
    if target.occurrence_type is OccurrenceType.UNICA:
        return Scope.SINGLE
    return select_scope(Scope.SINGLE)


# ---- Command handlers ---------------------------------------------------------


def cmd_create(
    kind: Kind | str,
    fields: Mapping[str, Any],
    *,
    database_url: str | None = None,
    dry_run: bool = False,
    settings: Settings | None = None,
) -> int:
    """Generate (and unless ``dry_run``, store) the series ``fields`` describe."""

    settings = settings or load_settings()
    spec = {**fields, "kind": str(kind)}
    try:
        if dry_run:
            batch = generate_series(spec, horizon=settings.recurring_horizon)
        else:
            store = _store(kind, database_url, settings)
            batch = create_series(store, spec, horizon=settings.recurring_horizon)
    except ObligationError as e:
        return _error(str(e))
    _print_batch(batch)
    return 0


def cmd_scope(
    kind: Kind | str,
    obligation_id: str,
    scope: Scope | str,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    settings = settings or load_settings()
    try:
        ids = resolve_scope(_store(kind, database_url, settings), obligation_id, scope)
    except ObligationError as e:
        return _error(str(e))
    for oid in ids:
        print(oid)
    return 0


def cmd_edit(
    kind: Kind | str,
    obligation_id: str,
    assignments: Sequence[str],
    scope: Scope | str | None = None,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    """Apply ``field=value`` assignments to the occurrences ``scope`` selects."""

    settings = settings or load_settings()
    try:
        patch = _parse_assignments(assignments)
        store = _store(kind, database_url, settings)
        chosen = Scope(scope) if scope else _ask_scope(store, obligation_id)
        ids = apply_bulk_edit(store, obligation_id, patch, chosen)
    except ObligationError as e:
        return _error(str(e))
    print(f"Updated {len(ids)} occurrence(s)")
    return 0


def cmd_delete(
    kind: Kind | str,
    obligation_id: str,
    scope: Scope | str | None = None,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    settings = settings or load_settings()
    try:
        store = _store(kind, database_url, settings)
        chosen = Scope(scope) if scope else _ask_scope(store, obligation_id)
        ids = apply_bulk_delete(store, obligation_id, chosen)
    except ObligationError as e:
        return _error(str(e))
    print(f"Deleted {len(ids)} occurrence(s)")
    return 0


def cmd_pay(
    kind: Kind | str,
    obligation_id: str,
    amount: str,
    payment_date: str | None = None,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    """Confirm payment (payables) or receipt (receivables) of one occurrence."""

    settings = settings or load_settings()
    try:
        when = parse_iso_date(payment_date, field="date") if payment_date else date.today()
        ob = confirm_payment(_store(kind, database_url, settings), obligation_id, when, amount)
    except ObligationError as e:
        return _error(str(e))
    print(f"{ob.id}\t{ob.status.value}\t{ob.payment_date}\t{ob.paid_amount}")
    return 0


def cmd_cancel(
    kind: Kind | str,
    obligation_id: str,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    settings = settings or load_settings()
    try:
        ob = cancel_obligation(_store(kind, database_url, settings), obligation_id)
    except ObligationError as e:
        return _error(str(e))
    print(f"{ob.id}\t{ob.status.value}")
    return 0


def cmd_extend(
    kind: Kind | str,
    today: str | None = None,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    """Top up recurring series whose last pending occurrence is close."""

    settings = settings or load_settings()
    try:
        created = extend_recurring_series(
            _store(kind, database_url, settings),
            today=_today(today),
            lookahead_months=settings.extend_lookahead_months,
            horizon=settings.recurring_horizon,
        )
    except ObligationError as e:
        return _error(str(e))
    series = {ob.series_id for ob in created}
    print(f"Extended {len(series)} series with {len(created)} occurrence(s)")
    return 0


def cmd_list(
    kind: Kind | str,
    filters: Mapping[str, Any],
    *,
    today: str | None = None,
    output: str = "table",
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    """Print matching occurrences with their display status."""

    settings = settings or load_settings()
    try:
        day = _today(today)
        flt = ListFilters.model_validate({k: v for k, v in filters.items() if v is not None})
        rows = list_obligations(_store(kind, database_url, settings), flt, today=day)
    except PydanticValidationError as e:
        return _error("; ".join(err["msg"] for err in e.errors()))
    except ObligationError as e:
        return _error(str(e))

    if output == "tsv":
        for ob in rows:
            print(
                f"{ob.id}\t{ob.due_date.isoformat()}\t{ob.amount}\t"
                f"{display_status(ob, day)}\t{ob.category}\t{ob.description}"
            )
        return 0

    table = Table(title=f"{Kind(kind).value}s ({len(rows)})")
    table.add_column("Due")
    table.add_column("Description")
    table.add_column("Category")
    table.add_column("Amount", justify="right")
    table.add_column("Status")
    table.add_column("Id", no_wrap=True)
    for ob in rows:
        status = display_status(ob, day)
        style = "red" if status == "overdue" else None
        table.add_row(
            ob.due_date.isoformat(),
            ob.description,
            ob.category,
            f"{ob.amount:.2f}",
            status,
            ob.id,
            style=style,
        )
    console.print(table)
    return 0


def cmd_stats(
    kind: Kind | str,
    today: str | None = None,
    *,
    database_url: str | None = None,
    settings: Settings | None = None,
) -> int:
    settings = settings or load_settings()
    try:
        summary = dashboard(
            _store(kind, database_url, settings),
            today=_today(today),
            due_soon_days=settings.due_soon_days,
        )
    except ObligationError as e:
        return _error(str(e))
    for name in ("pending", "overdue", "settled_this_month", "due_soon"):
        bucket = getattr(summary, name)
        print(f"{name}\t{bucket.count}\t{bucket.total}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Manage payables and receivables: one-time, recurring and installment "
        "obligations. Loads DATABASE_URL from a local .env before running."
    ),
)

KIND_OPTION = typer.Option(Kind.PAYABLE, "--kind", help="Ledger to operate on.")
DATABASE_URL_OPTION = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else load_settings()


def _finish(code: int) -> None:
    raise typer.Exit(code)


@app.command("create")
def create_cmd(
    ctx: typer.Context,
    *,
    description: str = typer.Option(..., help="What the obligation is for."),
    counterpart: str = typer.Option(..., help="Supplier or customer id."),
    category: str = typer.Option(..., help="Category label."),
    amount: str = typer.Option(..., help="Amount; the total for installment plans."),
    due_date: str = typer.Option(..., help="First due date (YYYY-MM-DD)."),
    occurrence_type: OccurrenceType = typer.Option(
        OccurrenceType.UNICA, "--type", help="Occurrence type."
    ),
    issue_date: str | None = typer.Option(None, help="Issue date; defaults to today."),
    due_day: int | None = typer.Option(None, help="Day of month for series members."),
    installments: int | None = typer.Option(None, help="Installment count (parcelada)."),
    payment_method: str | None = typer.Option(None),
    notes: str | None = typer.Option(None),
    invoice_number: str | None = typer.Option(None),
    created_by: str | None = typer.Option(None),
    dry_run: bool = typer.Option(False, help="Print the generated series without storing it."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Create a one-time obligation, a recurring series or an installment plan."""

    fields = {
        "description": description,
        "counterpart_id": counterpart,
        "category": category,
        "amount": amount,
        "due_date": due_date,
        "issue_date": issue_date or date.today().isoformat(),
        "occurrence_type": occurrence_type.value,
        "due_day": due_day,
        "installments": installments,
        "payment_method": payment_method,
        "notes": notes,
        "invoice_number": invoice_number,
        "created_by": created_by,
    }
    _finish(
        cmd_create(
            kind,
            fields,
            database_url=database_url,
            dry_run=dry_run,
            settings=_settings(ctx),
        )
    )


@app.command("scope")
def scope_cmd(
    ctx: typer.Context,
    obligation_id: str = typer.Argument(..., help="Occurrence id."),
    *,
    scope: Scope = typer.Option(..., "--scope", help="single, following or all."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Print the ids an edit/delete with --scope would touch."""

    _finish(
        cmd_scope(kind, obligation_id, scope, database_url=database_url, settings=_settings(ctx))
    )


@app.command("edit")
def edit_cmd(
    ctx: typer.Context,
    obligation_id: str = typer.Argument(..., help="Occurrence id."),
    *,
    assignments: list[str] = typer.Option(
        ..., "--set", help="field=value (repeatable; empty value clears the field)."
    ),
    scope: Scope | None = typer.Option(None, "--scope", help="Asked interactively if omitted."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Edit one occurrence, the following ones, or the whole series."""

    _finish(
        cmd_edit(
            kind,
            obligation_id,
            assignments,
            scope,
            database_url=database_url,
            settings=_settings(ctx),
        )
    )


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    obligation_id: str = typer.Argument(..., help="Occurrence id."),
    *,
    scope: Scope | None = typer.Option(None, "--scope", help="Asked interactively if omitted."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Delete one occurrence, the following ones, or the whole series."""

    _finish(
        cmd_delete(kind, obligation_id, scope, database_url=database_url, settings=_settings(ctx))
    )


@app.command("pay")
def pay_cmd(
    ctx: typer.Context,
    obligation_id: str = typer.Argument(..., help="Occurrence id."),
    *,
    amount: str = typer.Option(..., help="Amount actually paid or received."),
    payment_date: str | None = typer.Option(
        None, "--date", help="Payment date (YYYY-MM-DD); defaults to today."
    ),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Mark one occurrence paid (payables) or received (receivables)."""

    _finish(
        cmd_pay(
            kind,
            obligation_id,
            amount,
            payment_date,
            database_url=database_url,
            settings=_settings(ctx),
        )
    )


@app.command("cancel")
def cancel_cmd(
    ctx: typer.Context,
    obligation_id: str = typer.Argument(..., help="Occurrence id."),
    *,
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Cancel one pending occurrence."""

    _finish(cmd_cancel(kind, obligation_id, database_url=database_url, settings=_settings(ctx)))


@app.command("extend")
def extend_cmd(
    ctx: typer.Context,
    *,
    today: str | None = typer.Option(None, help="Reference date (YYYY-MM-DD)."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Schedule more occurrences for recurring series about to run out."""

    _finish(cmd_extend(kind, today, database_url=database_url, settings=_settings(ctx)))


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    *,
    status: str | None = typer.Option(
        None, help="pending, paid, received, canceled or overdue."
    ),
    category: str | None = typer.Option(None),
    date_from: str | None = typer.Option(None, "--from", help="Due on or after (YYYY-MM-DD)."),
    date_to: str | None = typer.Option(None, "--to", help="Due on or before (YYYY-MM-DD)."),
    search: str | None = typer.Option(None, help="Substring of the description."),
    today: str | None = typer.Option(None, help="Reference date for overdue."),
    output: str = typer.Option("table", "--output", help="table or tsv."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """List occurrences; overdue is derived from --today."""

    filters = {
        "status": status,
        "category": category,
        "date_from": date_from,
        "date_to": date_to,
        "search": search,
    }
    _finish(
        cmd_list(
            kind,
            filters,
            today=today,
            output=output,
            database_url=database_url,
            settings=_settings(ctx),
        )
    )


@app.command("stats")
def stats_cmd(
    ctx: typer.Context,
    *,
    today: str | None = typer.Option(None, help="Reference date (YYYY-MM-DD)."),
    kind: Kind = KIND_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Pending, overdue, settled-this-month and due-soon totals."""

    _finish(cmd_stats(kind, today, database_url=database_url, settings=_settings(ctx)))


@app.callback()
def _root(ctx: typer.Context) -> None:
    """Load ``.env`` and settings, then configure logging once."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    try:
        settings = load_settings()
        configure_logging(settings.log_level)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    ctx.obj = settings


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    app()
