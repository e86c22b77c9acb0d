"""Merchant bucketing from free-text descriptions.

The merchant name is the description text before its first digit, trimmed
(``"STARBUCKS #1234"`` -> ``"STARBUCKS #"``). This is a grouping heuristic,
not entity resolution: the same merchant with different leading text lands in
different buckets, and dashboards rely on these bucket boundaries staying
stable.
"""

from __future__ import annotations

import re

_FIRST_DIGIT_RE = re.compile(r"[0-9]")


def extract_merchant(description: str) -> str:
    return _FIRST_DIGIT_RE.split(description, maxsplit=1)[0].strip()


__all__ = ["extract_merchant"]
