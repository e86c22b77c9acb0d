"""Canonical spending categories, keyword rules, and display colors.

Free-text category labels from statements (e.g. ``"Restaurant-Bar & Café"``)
are mapped onto a closed set of ten canonical categories by testing the
lower-cased label against an ordered list of keyword groups. The first group
with a matching substring wins; order is the tie-break when keywords overlap
(``"restaurant fee"`` is a Restaurant), so the table must not be reordered
casually. Bump :data:`RULES_VERSION` whenever the table changes.

Exports
-------
- ``CANONICAL_CATEGORIES``: the closed category set, in rule order.
- ``normalize_category(label)``: pure, total label -> canonical category.
- ``category_color(category)``: canonical category -> hex display color.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

RULES_VERSION = 1

FALLBACK_CATEGORY = "Other"

# (canonical category, keywords) in precedence order.
KEYWORD_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Restaurant", ("restaurant", "food", "cafe", "café", "fast food")),
    ("Groceries", ("groceries", "supermarket")),
    ("Gas & Fuel", ("gas", "fuel", "auto")),
    ("Shopping", ("merchandise", "supplies", "clothing", "electronics")),
    ("Entertainment", ("entertainment", "movie", "theater")),
    ("Subscriptions", ("computer services", "telecommunications")),
    ("Travel", ("travel", "airline", "lodging", "rental")),
    ("Health", ("drug", "pharmacy", "health")),
    ("Fees", ("fee", "adjustment", "interest")),
)

CANONICAL_CATEGORIES: tuple[str, ...] = (
    *(name for name, _ in KEYWORD_GROUPS),
    FALLBACK_CATEGORY,
)

CATEGORY_COLORS: Mapping[str, str] = MappingProxyType(
    {
        "Restaurant": "#ef4444",
        "Groceries": "#f97316",
        "Gas & Fuel": "#eab308",
        "Shopping": "#22c55e",
        "Entertainment": "#06b6d4",
        "Subscriptions": "#3b82f6",
        "Travel": "#8b5cf6",
        "Health": "#ec4899",
        "Fees": "#6b7280",
        "Other": "#a3a3a3",
    }
)


def normalize_category(label: str | None) -> str:
    """Map a free-text category label to one of :data:`CANONICAL_CATEGORIES`.

    Matching is case-insensitive substring search over :data:`KEYWORD_GROUPS`
    in order; labels matching nothing (including ``None``/empty) map to
    ``"Other"``.
    """

    lower = (label or "").lower()
    for name, keywords in KEYWORD_GROUPS:
        if any(k in lower for k in keywords):
            return name
    return FALLBACK_CATEGORY


def category_color(category: str) -> str:
    """Return the display color for ``category`` (``"Other"``'s when unknown)."""

    return CATEGORY_COLORS.get(category, CATEGORY_COLORS[FALLBACK_CATEGORY])


__all__ = [
    "CANONICAL_CATEGORIES",
    "CATEGORY_COLORS",
    "FALLBACK_CATEGORY",
    "KEYWORD_GROUPS",
    "RULES_VERSION",
    "category_color",
    "normalize_category",
]
