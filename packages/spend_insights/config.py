"""Runtime settings resolved from the environment.

The CLI loads a local ``.env`` (via ``python-dotenv``) before calling
:func:`load_settings`; library callers may pass explicit values instead and
never need this module.

Variables
---------
- ``SPEND_INSIGHTS_DATABASE_URL`` (falls back to ``DATABASE_URL``)
- ``SPEND_INSIGHTS_LOG_LEVEL``
- ``SPEND_INSIGHTS_INVALID_DATES``: ``today`` or ``skip``
- ``SPEND_INSIGHTS_TOP_MERCHANTS``: positive integer
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, TypeAlias

from .logging_setup import LOG_LEVEL_ENV, get_logger

logger = get_logger("spend_insights.config")

InvalidDatePolicy: TypeAlias = Literal["today", "skip"]

INVALID_DATE_POLICIES: tuple[str, ...] = ("today", "skip")
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///spend_insights.db"
DEFAULT_TOP_MERCHANTS = 5


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str
    log_level: str
    invalid_dates: InvalidDatePolicy
    top_merchants: int


def _resolve_invalid_dates(raw: str | None) -> InvalidDatePolicy:
    if raw is None or not raw.strip():
        return "today"
    v = raw.strip().lower()
    if v == "skip":
        return "skip"
    if v != "today":
        logger.warning("Unknown SPEND_INSIGHTS_INVALID_DATES=%r; using 'today'", raw)
    return "today"


def _resolve_top_merchants(raw: str | None) -> int:
    try:
        n = int(raw) if raw else None
    except ValueError:
        n = None
    if n is None or n <= 0:
        if raw:
            logger.warning(
                "Ignoring SPEND_INSIGHTS_TOP_MERCHANTS=%r; using %d", raw, DEFAULT_TOP_MERCHANTS
            )
        return DEFAULT_TOP_MERCHANTS
    return n


def load_settings() -> Settings:
    """Build :class:`Settings` from the current process environment."""

    return Settings(
        database_url=(
            os.getenv("SPEND_INSIGHTS_DATABASE_URL")
            or os.getenv("DATABASE_URL")
            or DEFAULT_DATABASE_URL
        ),
        log_level=(os.getenv(LOG_LEVEL_ENV) or "INFO").strip().upper(),
        invalid_dates=_resolve_invalid_dates(os.getenv("SPEND_INSIGHTS_INVALID_DATES")),
        top_merchants=_resolve_top_merchants(os.getenv("SPEND_INSIGHTS_TOP_MERCHANTS")),
    )


__all__ = [
    "DEFAULT_DATABASE_URL",
    "DEFAULT_TOP_MERCHANTS",
    "INVALID_DATE_POLICIES",
    "InvalidDatePolicy",
    "Settings",
    "load_settings",
]
