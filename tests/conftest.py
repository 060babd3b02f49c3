"""Pytest configuration shared by the suite.

Makes the workspace importable without an install (``packages/`` for
``obligations``, ``libs/db/src`` for ``db``, and the repo root for
``tests.helpers``) and provides per-test SQLite-backed stores.

The engine in ``db.client`` is a process-wide singleton bound to one URL, so
every database fixture disposes it on teardown; the next test then binds its
own temporary file.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in [str(_ROOT / "packages"), str(_ROOT / "libs" / "db" / "src"), str(_ROOT)]
    if p not in sys.path
]

from db.client import dispose_engine  # noqa: E402

from obligations.logging_setup import reset_logging  # noqa: E402
from obligations.models import Kind  # noqa: E402
from obligations.store import SqlAlchemyStore  # noqa: E402

from tests.helpers.db import bootstrap_sqlite_db  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep a developer's shell environment out of the tests."""

    for name in (
        "DATABASE_URL",
        "OBLIGATIONS_LOG_LEVEL",
        "OBLIGATIONS_RECURRING_HORIZON",
        "OBLIGATIONS_DUE_SOON_DAYS",
        "OBLIGATIONS_EXTEND_LOOKAHEAD_MONTHS",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    reset_logging()


@pytest.fixture
def db_url(tmp_path: Path) -> Iterator[str]:
    url = bootstrap_sqlite_db(tmp_path / "obligations.sqlite3")
    yield url
    dispose_engine()


@pytest.fixture
def payables(db_url: str) -> SqlAlchemyStore:
    return SqlAlchemyStore(Kind.PAYABLE, database_url=db_url)


@pytest.fixture
def receivables(db_url: str) -> SqlAlchemyStore:
    return SqlAlchemyStore(Kind.RECEIVABLE, database_url=db_url)
