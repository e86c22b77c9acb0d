"""Persistence of the imported document set as one opaque blob.

The whole set of :class:`~spend_insights.models.Document` objects is written
as a single JSON payload under an application key in the ``app_blobs`` table
(``db.models.AppBlob``). Callers own the session and transaction scope, e.g.::

    with session_scope(database_url=url) as session:
        docs = load_documents(session)
        save_documents(session, add_document(docs, new_doc))

Reading never fails on bad payloads: a missing blob is an empty set, and a
blob that does not validate against :class:`StoredDocumentSet` is logged and
treated as empty.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime

from db.models.blobs import AppBlob
from pydantic import ValidationError
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import (
    STORAGE_SCHEMA_VERSION,
    Document,
    Record,
    StoredDocument,
    StoredDocumentSet,
    StoredRecord,
)

logger = get_logger("spend_insights.storage")

STORAGE_KEY = "finance_app_files"


# ---------------------------------------------------------------------------
# Domain <-> DTO mapping
# ---------------------------------------------------------------------------


def _to_stored(doc: Document) -> StoredDocument:
    return StoredDocument(
        id=doc.id,
        filename=doc.filename,
        uploaded_at=doc.uploaded_at,
        records=[
            StoredRecord(
                id=r.id,
                date=r.date,
                description=r.description,
                amount=r.amount,
                category=r.category,
                city=r.city,
                state=r.state,
                document_id=r.document_id,
            )
            for r in doc.records
        ],
    )


def _from_stored(doc: StoredDocument) -> Document:
    return Document(
        id=doc.id,
        filename=doc.filename,
        uploaded_at=doc.uploaded_at,
        records=tuple(
            Record(
                id=r.id,
                date=r.date,
                description=r.description,
                amount=r.amount,
                category=r.category,
                city=r.city,
                state=r.state,
                document_id=r.document_id,
            )
            for r in doc.records
        ),
    )


def serialize_documents(documents: Iterable[Document]) -> str:
    payload = StoredDocumentSet(
        schema_version=STORAGE_SCHEMA_VERSION,
        documents=[_to_stored(d) for d in documents],
    )
    return json.dumps(payload.model_dump(mode="json"), ensure_ascii=False, separators=(",", ":"))


def deserialize_documents(text: str) -> list[Document]:
    """Parse a stored payload; raises :class:`pydantic.ValidationError` when invalid."""

    parsed = StoredDocumentSet.model_validate_json(text)
    return [_from_stored(d) for d in parsed.documents]


# ---------------------------------------------------------------------------
# Session-scoped operations
# ---------------------------------------------------------------------------


def load_documents(session: Session, *, key: str = STORAGE_KEY) -> list[Document]:
    """Return every stored document (empty when nothing or nothing valid is stored)."""

    row = session.get(AppBlob, key)
    if row is None:
        return []
    try:
        documents = deserialize_documents(row.payload)
    except ValidationError:
        logger.warning("storage:corrupt_blob key=%s; treating as empty", key, exc_info=True)
        return []
    logger.debug("storage:loaded key=%s documents=%d", key, len(documents))
    return documents


def save_documents(
    session: Session, documents: Iterable[Document], *, key: str = STORAGE_KEY
) -> None:
    """Replace the stored blob with ``documents`` (commit is the caller's)."""

    docs = list(documents)
    payload = serialize_documents(docs)
    now = datetime.now(UTC)
    row = session.get(AppBlob, key)
    if row is None:
        session.add(AppBlob(key=key, payload=payload, updated_at=now))
    else:
        row.payload = payload
        row.updated_at = now
    session.flush()
    logger.debug("storage:saved key=%s documents=%d", key, len(docs))


def clear_documents(session: Session, *, key: str = STORAGE_KEY) -> bool:
    """Delete the stored blob; returns whether one existed."""

    row = session.get(AppBlob, key)
    if row is None:
        return False
    session.delete(row)
    session.flush()
    return True


# ---------------------------------------------------------------------------
# Document-set helpers
# ---------------------------------------------------------------------------


def add_document(documents: Iterable[Document], document: Document) -> tuple[Document, ...]:
    return (*documents, document)


def remove_document(documents: Iterable[Document], document_id: str) -> tuple[Document, ...]:
    """Return the set without ``document_id``; its records go with it."""

    return tuple(d for d in documents if d.id != document_id)


__all__ = [
    "STORAGE_KEY",
    "add_document",
    "clear_documents",
    "deserialize_documents",
    "load_documents",
    "remove_document",
    "save_documents",
    "serialize_documents",
]
