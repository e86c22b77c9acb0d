"""Render records as a comma-separated text blob for download.

Column order is fixed: ``Date, Description, Amount, Category, City, State``.
Dates are written ``M/D/YYYY`` so the export can be re-imported; the
description is always quoted (embedded quotes doubled); amounts carry exactly
two decimals. Writing the text to a file is the caller's concern.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from .models import Record

EXPORT_HEADERS: tuple[str, ...] = ("Date", "Description", "Amount", "Category", "City", "State")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _cell(value: str | None) -> str:
    s = value or ""
    if any(ch in s for ch in (",", '"', "\n", "\r")):
        return _quote(s)
    return s


def _fmt_amount(d: Decimal) -> str:
    return f"{d.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def export_csv(records: Iterable[Record]) -> str:
    lines = [",".join(EXPORT_HEADERS)]
    for r in records:
        lines.append(
            ",".join(
                (
                    f"{r.date.month}/{r.date.day}/{r.date.year}",
                    _quote(r.description),
                    _fmt_amount(r.amount),
                    _cell(r.category),
                    _cell(r.city),
                    _cell(r.state),
                )
            )
        )
    return "\n".join(lines)


__all__ = ["EXPORT_HEADERS", "export_csv"]
