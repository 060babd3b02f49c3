"""DB helpers for tests: bootstrap a temporary SQLite DB and seed obligations."""

from __future__ import annotations

import os
from pathlib import Path

from db import Base
from db.client import get_engine
from db.models.ledger import ObObligation
from sqlalchemy import inspect


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default).
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)
    Base.metadata.create_all(bind=engine)
    _assert_obligations_schema_in_sync(url)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def _assert_obligations_schema_in_sync(database_url: str) -> None:
    """ORM column set matches what SQLite actually created."""

    expected = {c.name for c in ObObligation.__table__.columns}
    inspector = inspect(get_engine(database_url=database_url))
    got = {c["name"] for c in inspector.get_columns(ObObligation.__tablename__)}
    missing = expected - got
    extra = got - expected
    assert not missing and not extra, (
        f"ob_obligations schema drift: missing={missing or '∅'}, extra={extra or '∅'}"
    )
