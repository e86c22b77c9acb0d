"""Pure reducers and filters over record sequences.

Every function here takes an iterable of :class:`~spend_insights.models.Record`
and returns new objects; inputs are never mutated and nothing is cached, so
callers can recompute views freely (e.g. after changing a date range).

Ordering contracts
------------------
- :func:`category_totals`: total descending, then category name ascending.
- :func:`monthly_spending`: ``"YYYY-MM"`` key ascending (chronological).
- :func:`top_merchants`: total descending, then merchant name ascending.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal, TypeAlias

from .categories import category_color
from .merchants import extract_merchant
from .models import (
    CategoryTotal,
    DateRange,
    Document,
    MerchantTotal,
    MonthlyTotal,
    Record,
    SpendingSummary,
)

SortField: TypeAlias = Literal["date", "amount", "category"]

SORT_FIELDS: tuple[str, ...] = ("date", "amount", "category")

# Dashboard presets: window length in days ending today, ``None`` for unbounded.
DATE_RANGE_PRESETS: dict[str, int | None] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}

_CENT = Decimal("0.01")


# ---------------------------------------------------------------------------
# Grouped totals
# ---------------------------------------------------------------------------


def category_totals(records: Iterable[Record]) -> list[CategoryTotal]:
    """Sum amount and count per canonical category, largest total first."""

    groups: dict[str, tuple[Decimal, int]] = {}
    for r in records:
        total, count = groups.get(r.category, (Decimal(0), 0))
        groups[r.category] = (total + r.amount, count + 1)

    out = [
        CategoryTotal(category=c, total=t, count=n, color=category_color(c))
        for c, (t, n) in groups.items()
    ]
    out.sort(key=lambda ct: (-ct.total, ct.category))
    return out


def month_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def monthly_spending(records: Iterable[Record]) -> list[MonthlyTotal]:
    """Sum amounts per calendar month, oldest month first."""

    months: dict[str, Decimal] = {}
    for r in records:
        key = month_key(r.date)
        months[key] = months.get(key, Decimal(0)) + r.amount
    return [MonthlyTotal(month=k, total=months[k]) for k in sorted(months)]


def top_merchants(records: Iterable[Record], limit: int = 10) -> list[MerchantTotal]:
    """Rank merchant buckets by total spend.

    Buckets come from :func:`~spend_insights.merchants.extract_merchant`.
    ``limit <= 0`` yields ``[]``; a limit above the number of buckets yields
    all of them.
    """

    if limit <= 0:
        return []
    groups: dict[str, tuple[Decimal, int]] = {}
    for r in records:
        name = extract_merchant(r.description)
        total, count = groups.get(name, (Decimal(0), 0))
        groups[name] = (total + r.amount, count + 1)

    out = [MerchantTotal(name=n, total=t, count=c) for n, (t, c) in groups.items()]
    out.sort(key=lambda m: (-m.total, m.name))
    return out[:limit]


def spending_summary(records: Iterable[Record]) -> SpendingSummary:
    """Total, count, per-record average (to the cent) and top category."""

    items = list(records)
    total = sum((r.amount for r in items), Decimal(0))
    count = len(items)
    average = (total / count).quantize(_CENT, rounding=ROUND_HALF_UP) if count else Decimal(0)
    totals = category_totals(items)
    return SpendingSummary(
        total=total,
        count=count,
        average=average,
        top_category=totals[0] if totals else None,
    )


# ---------------------------------------------------------------------------
# Filters and listings
# ---------------------------------------------------------------------------


def filter_by_date_range(
    records: Iterable[Record],
    start: date | None = None,
    end: date | None = None,
) -> list[Record]:
    """Keep records with ``start <= date <= end``; a ``None`` bound is open."""

    return [
        r
        for r in records
        if (start is None or r.date >= start) and (end is None or r.date <= end)
    ]


def relative_date_range(preset: str, *, today: date | None = None) -> DateRange:
    """Resolve a dashboard preset (``7d``, ``30d``, ``90d``, ``all``) to bounds."""

    if preset not in DATE_RANGE_PRESETS:
        raise ValueError(
            f"unknown date range preset: {preset!r} (expected one of "
            + ", ".join(DATE_RANGE_PRESETS)
            + ")"
        )
    days = DATE_RANGE_PRESETS[preset]
    if days is None:
        return DateRange()
    end = today or date.today()
    return DateRange(start=end - timedelta(days=days - 1), end=end)


def all_records(documents: Iterable[Document]) -> list[Record]:
    """Flatten the records of every document, most recent first."""

    out = [r for doc in documents for r in doc.records]
    out.sort(key=lambda r: r.date, reverse=True)
    return out


def list_categories(records: Iterable[Record]) -> list[str]:
    return sorted({r.category for r in records})


def search_records(
    records: Iterable[Record],
    *,
    text: str | None = None,
    category: str | None = None,
    min_amount: Decimal | None = None,
    max_amount: Decimal | None = None,
    sort_by: SortField = "date",
    descending: bool = True,
) -> list[Record]:
    """Filter and sort records for the transactions listing.

    ``text`` is a case-insensitive substring matched against description,
    category, city and state. ``category`` must match exactly. Amount bounds
    are inclusive.
    """

    if sort_by not in SORT_FIELDS:
        raise ValueError(f"unknown sort field: {sort_by!r}")

    needle = (text or "").strip().lower()

    def _matches(r: Record) -> bool:
        if needle:
            haystack: Sequence[str] = (r.description, r.category, r.city or "", r.state or "")
            if not any(needle in h.lower() for h in haystack):
                return False
        if category is not None and r.category != category:
            return False
        if min_amount is not None and r.amount < min_amount:
            return False
        if max_amount is not None and r.amount > max_amount:
            return False
        return True

    out = [r for r in records if _matches(r)]
    if sort_by == "date":
        out.sort(key=lambda r: r.date, reverse=descending)
    elif sort_by == "amount":
        out.sort(key=lambda r: r.amount, reverse=descending)
    else:
        out.sort(key=lambda r: r.category.casefold(), reverse=descending)
    return out


__all__ = [
    "DATE_RANGE_PRESETS",
    "SORT_FIELDS",
    "all_records",
    "category_totals",
    "filter_by_date_range",
    "list_categories",
    "month_key",
    "monthly_spending",
    "relative_date_range",
    "search_records",
    "spending_summary",
    "top_merchants",
]
