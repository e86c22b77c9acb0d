"""Statement CSV -> :class:`~spend_insights.models.Record` pipeline.

Parsing uses the stdlib :mod:`csv` module in strict mode (RFC 4180 quoting,
embedded newlines and doubled quotes). Recognized header names, trimmed before
lookup: ``Date``, ``Description``, ``Amount`` (required per row), ``Category``
and ``City/State`` (optional).

Row policy (best-effort import, nothing here raises for bad content):
- a row missing any required value is skipped;
- a row whose amount parses to ``<= 0`` is skipped (payments, refunds and
  credits are excluded from spend analysis);
- an unparsable date is replaced by today's date (``invalid_dates="today"``)
  or the row is skipped (``invalid_dates="skip"``). Replaced dates are
  counted in the per-document summary logged at INFO.

Structural problems (no header row, malformed quoting) surface as
:class:`csv.Error`.
"""

from __future__ import annotations

import csv
import uuid
from collections import Counter
from datetime import UTC, date, datetime
from io import StringIO

from .categories import FALLBACK_CATEGORY, normalize_category
from .config import INVALID_DATE_POLICIES, InvalidDatePolicy
from .fields import parse_amount, parse_date
from .logging_setup import get_logger
from .models import Document, Record

logger = get_logger("spend_insights.builder")

REQUIRED_COLUMNS: tuple[str, ...] = ("Date", "Description", "Amount")
CATEGORY_COLUMN = "Category"
CITY_STATE_COLUMN = "City/State"


def _new_id() -> str:
    return uuid.uuid4().hex


def _read_rows(csv_text: str) -> list[dict[str, str]]:
    with StringIO(csv_text.removeprefix("\ufeff")) as f:
        reader = csv.DictReader(f, strict=True)
        if not reader.fieldnames:
            raise csv.Error("CSV appears to have no header row")
        reader.fieldnames = [h.strip() for h in reader.fieldnames]
        rows: list[dict[str, str]] = []
        for row in reader:
            # Drop the ``None`` key DictReader uses for surplus cells and map
            # missing trailing cells to "".
            rows.append(
                {k: (v if v is not None else "") for k, v in row.items() if k is not None}
            )
        return rows


def _split_city_state(raw: str | None) -> tuple[str | None, str | None]:
    if raw is None:
        return None, None
    parts = [p.strip() for p in raw.split("\n")]
    city = parts[0] or None
    state = (parts[1] or None) if len(parts) > 1 else None
    return city, state


def parse_statement(
    csv_text: str,
    document_id: str,
    *,
    invalid_dates: InvalidDatePolicy = "today",
    today: date | None = None,
) -> list[Record]:
    """Build the records of one statement, most recent first.

    Parameters
    ----------
    csv_text:
        The whole delimited document, header row included.
    document_id:
        Identifier stamped on every record as ``document_id``.
    invalid_dates:
        ``"today"`` substitutes ``today`` for unparsable dates; ``"skip"``
        drops such rows.
    today:
        Date used by the ``"today"`` policy. Defaults to the local date.

    Returns
    -------
    list[Record]
        Sorted by date descending; rows with equal dates keep file order.
    """

    if invalid_dates not in INVALID_DATE_POLICIES:
        raise ValueError(f"unknown invalid_dates policy: {invalid_dates!r}")
    fallback_date = today or date.today()

    skipped: Counter[str] = Counter()
    substituted = 0
    records: list[Record] = []
    for row in _read_rows(csv_text):
        raw_date, description, raw_amount = (
            (row.get(col) or "").strip() for col in REQUIRED_COLUMNS
        )
        if not raw_date or not description or not raw_amount:
            skipped["missing_field"] += 1
            continue

        amount = parse_amount(raw_amount)
        if amount <= 0:
            skipped["non_positive_amount"] += 1
            continue

        parsed_date = parse_date(raw_date)
        if parsed_date is None:
            if invalid_dates == "skip":
                skipped["invalid_date"] += 1
                continue
            substituted += 1
            logger.debug("Unparsable date %r; using %s", raw_date, fallback_date)
            parsed_date = fallback_date

        city, state = _split_city_state(row.get(CITY_STATE_COLUMN))
        records.append(
            Record(
                id=_new_id(),
                date=parsed_date,
                description=description,
                amount=amount,
                category=normalize_category(row.get(CATEGORY_COLUMN) or FALLBACK_CATEGORY),
                city=city,
                state=state,
                document_id=document_id,
            )
        )

    # ``reverse=True`` keeps the sort stable for equal dates.
    records.sort(key=lambda r: r.date, reverse=True)

    if skipped or substituted:
        logger.info(
            "Document %s: kept %d rows (%d dated today), skipped %s",
            document_id,
            len(records),
            substituted,
            ", ".join(f"{reason}={n}" for reason, n in sorted(skipped.items())) or "none",
        )
    else:
        logger.debug("Document %s: kept %d rows", document_id, len(records))
    return records


def create_document(
    filename: str,
    csv_text: str,
    *,
    invalid_dates: InvalidDatePolicy = "today",
    today: date | None = None,
) -> Document:
    """Import one statement: assign an id and timestamp, then build its records."""

    document_id = _new_id()
    records = parse_statement(csv_text, document_id, invalid_dates=invalid_dates, today=today)
    return Document(
        id=document_id,
        filename=filename,
        uploaded_at=datetime.now(UTC),
        records=tuple(records),
    )


__all__ = ["REQUIRED_COLUMNS", "create_document", "parse_statement"]
