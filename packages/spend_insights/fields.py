"""Field parsers for raw statement cells (dates and amounts).

Both parsers are total: they never raise on malformed input.

- :func:`parse_date` returns ``None`` when no interpretation works. Callers
  decide what a failure means (the record builder either substitutes today
  or drops the row).
- :func:`parse_amount` returns ``Decimal(0)`` when nothing numeric can be
  read, which the builder then drops as a non-positive amount.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

# Fallback formats tried after the slash form and ISO-8601.
_TEXT_DATE_FORMATS: tuple[str, ...] = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%Y/%m/%d",
)

_AMOUNT_STRIP_RE = re.compile(r"[$,\s]")
# Leading numeric prefix, read the way a lenient float parser would.
_AMOUNT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_slash_date(token: str) -> date | None:
    parts = token.split("/")
    if len(parts) != 3:
        return None
    month_s, day_s, year_s = (p.strip() for p in parts)
    try:
        month, day, year = int(month_s), int(day_s), int(year_s)
    except ValueError:
        return None
    if len(year_s) <= 2:
        # Two-digit years read like ``%y``: 00-68 -> 2000s, 69-99 -> 1900s.
        year += 2000 if year < 69 else 1900
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: str | None) -> date | None:
    """Parse a statement date; ``None`` signals a parse failure.

    ``MM/DD/YYYY`` (positional month/day/year, no locale inference) is tried
    first on the first whitespace-separated token, so trailing times are
    ignored. Anything else falls back to ISO-8601 and a short list of textual
    formats such as ``Mar 15, 2024``.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None

    first = s.split()[0]
    if first.count("/") == 2:
        slash = _parse_slash_date(first)
        if slash is not None:
            return slash

    try:
        return datetime.fromisoformat(s).date()
    except ValueError:
        pass
    for fmt in _TEXT_DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(raw: str | None) -> Decimal:
    """Parse an amount such as ``"$1,234.50"``; unparsable input yields ``0``."""

    if raw is None:
        return Decimal(0)
    s = _AMOUNT_STRIP_RE.sub("", raw)
    m = _AMOUNT_PREFIX_RE.match(s)
    if m is None:
        return Decimal(0)
    try:
        d = Decimal(m.group(0))
    except InvalidOperation:
        return Decimal(0)
    return d if d.is_finite() else Decimal(0)


__all__ = ["parse_amount", "parse_date"]
