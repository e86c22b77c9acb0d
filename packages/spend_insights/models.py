"""Data models for ``spend_insights``.

Domain objects are frozen dataclasses: a :class:`Record` is one normalized
spending row, a :class:`Document` is one imported statement owning the
records built from it at import time. Derived views (category, monthly and
merchant totals) are recomputed on demand and never persisted.

The pydantic DTOs at the bottom describe the JSON blob the persistence layer
writes; they are kept separate from the domain objects so the on-disk shape
can carry a schema version.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

# ---------------------------------------------------------------------------
# Core record and document
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Record:
    """A single normalized spending entry.

    Attributes
    ----------
    id:
        Random unique identifier assigned at build time.
    date:
        Calendar date of the transaction (no time, no timezone).
    description:
        Trimmed free-text description from the statement.
    amount:
        Strictly positive amount. Currency is not tracked.
    category:
        One of :data:`spend_insights.categories.CANONICAL_CATEGORIES`.
    city, state:
        Optional location parts from the ``City/State`` column.
    document_id:
        Identifier of the :class:`Document` the record was built from.
    """

    id: str
    date: dt.date
    description: str
    amount: Decimal
    category: str
    city: str | None
    state: str | None
    document_id: str


@dataclass(frozen=True, slots=True)
class Document:
    """One imported statement and the records derived from it."""

    id: str
    filename: str
    uploaded_at: dt.datetime
    records: tuple[Record, ...] = field(default_factory=tuple)

    @property
    def total(self) -> Decimal:
        return sum((r.amount for r in self.records), Decimal(0))


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CategoryTotal:
    category: str
    total: Decimal
    count: int
    color: str


@dataclass(frozen=True, slots=True)
class MonthlyTotal:
    month: str  # "YYYY-MM"
    total: Decimal


@dataclass(frozen=True, slots=True)
class MerchantTotal:
    name: str
    total: Decimal
    count: int


@dataclass(frozen=True, slots=True)
class SpendingSummary:
    """Headline numbers for a record set.

    ``average`` is ``0`` for an empty set; ``top_category`` is the category
    with the largest total, or ``None`` when there are no records.
    """

    total: Decimal
    count: int
    average: Decimal
    top_category: CategoryTotal | None


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive date bounds; ``None`` leaves that side unbounded."""

    start: dt.date | None = None
    end: dt.date | None = None


# ---------------------------------------------------------------------------
# DTOs for the persisted document-set blob
# ---------------------------------------------------------------------------

STORAGE_SCHEMA_VERSION = 1


class StoredRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    date: dt.date
    description: str
    amount: Decimal
    category: str
    city: str | None = None
    state: str | None = None
    document_id: str

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("amount must be positive")
        return v


class StoredDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    filename: str
    uploaded_at: dt.datetime
    records: list[StoredRecord]


class StoredDocumentSet(BaseModel):
    """Top-level schema for the persisted blob."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int
    documents: list[StoredDocument]

    @field_validator("schema_version")
    @classmethod
    def _known_version(cls, v: int) -> int:
        if v != STORAGE_SCHEMA_VERSION:
            raise ValueError(f"unsupported schema_version: {v}")
        return v


__all__ = [
    "STORAGE_SCHEMA_VERSION",
    "CategoryTotal",
    "DateRange",
    "Document",
    "MerchantTotal",
    "MonthlyTotal",
    "Record",
    "SpendingSummary",
    "StoredDocument",
    "StoredDocumentSet",
    "StoredRecord",
]
