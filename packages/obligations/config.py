"""Environment-driven settings for the CLI and other entry points.

Library functions take their knobs as arguments; only entry points read the
environment, through :func:`load_settings`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .series import RECURRING_HORIZON


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str | None = None
    log_level: str | None = None
    recurring_horizon: int = RECURRING_HORIZON
    due_soon_days: int = 3
    extend_lookahead_months: int = 1


def _int_env(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from ``environ`` (``os.environ`` by default)."""

    env = os.environ if environ is None else environ
    return Settings(
        database_url=(env.get("DATABASE_URL") or "").strip() or None,
        log_level=(env.get("OBLIGATIONS_LOG_LEVEL") or "").strip() or None,
        recurring_horizon=_int_env(
            env, "OBLIGATIONS_RECURRING_HORIZON", RECURRING_HORIZON, minimum=1
        ),
        due_soon_days=_int_env(env, "OBLIGATIONS_DUE_SOON_DAYS", 3, minimum=0),
        extend_lookahead_months=_int_env(
            env, "OBLIGATIONS_EXTEND_LOOKAHEAD_MONTHS", 1, minimum=0
        ),
    )


__all__ = ["Settings", "load_settings"]
