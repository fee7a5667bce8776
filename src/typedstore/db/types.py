"""SQLAlchemy column type for typed store documents."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator

from typedstore.serialization import to_primitive


class DocumentType(TypeDecorator):
    """JSON column holding a typed store document.

    Values are converted to JSON primitives before binding, so documents
    holding datetimes, decimals or pydantic models persist without a custom
    engine-level serializer. Loaded values are plain dicts; the owning
    model guards them on load.
    """

    impl = JSON
    cache_ok = True

    def __init__(self, *args: Any, **kwargs: Any):
        kwargs.setdefault("none_as_null", True)
        super().__init__(*args, **kwargs)

    def process_bind_param(self, value: Any, dialect: Dialect) -> Any:
        if value is None:
            return None
        return to_primitive(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> Any:
        return value
