"""db: shared database library (SQLAlchemy).

Public exports
--------------
- ``Base`` and ``metadata`` for schema creation
- ORM models in ``db.models.blobs`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.blobs import AppBlob, Base

metadata = Base.metadata

__all__ = [
    "AppBlob",
    "Base",
    "metadata",
]
