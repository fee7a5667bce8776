"""SQLAlchemy integration for typed stores.

- DocumentType: JSON column type that stores documents as JSON primitives
- TypedStoreModel: declarative mixin wiring load/refresh/flush events
"""

from typedstore.db.engine import create_store_engine, session_scope
from typedstore.db.models import TypedStoreModel
from typedstore.db.types import DocumentType

__all__ = [
    "DocumentType",
    "TypedStoreModel",
    "create_store_engine",
    "session_scope",
]
