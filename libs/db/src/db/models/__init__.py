"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the key/value blob table used by ``spend_insights``.
"""

from .blobs import AppBlob, Base

__all__ = [
    "AppBlob",
    "Base",
]
