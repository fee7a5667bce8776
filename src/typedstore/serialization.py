"""Conversion of documents to JSON primitives.

Used both for the stored column value and for the change-tracking
snapshots, so both sides always agree on what "the same document" means.
"""

from __future__ import annotations

from typing import Any

from pydantic_core import to_jsonable_python


def to_primitive(value: Any) -> Any:
    """Convert a document (or any value inside one) to JSON primitives.

    Datetimes become ISO-8601 strings, decimals become strings and pydantic
    models are dumped to dicts. Unsupported objects raise
    ``pydantic_core.PydanticSerializationError``.
    """
    return to_jsonable_python(value)
