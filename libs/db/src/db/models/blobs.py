from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Key/value: app_blobs
# ---------------------------


class AppBlob(Base):
    """One opaque payload per application key.

    The application stores its whole document set as a single JSON text under
    a fixed key; the table knows nothing about the payload shape.
    """

    __tablename__ = "app_blobs"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    payload: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
