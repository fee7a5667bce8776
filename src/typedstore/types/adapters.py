"""Adapters from pydantic to the caster protocol.

Pydantic models, ``TypeAdapter`` instances and typing constructs
(``list[Model]``, ``Annotated[str, StringConstraints(...)]``) are all cast
through ``TypeAdapter.validate_python``. Validation errors propagate
unmodified to the accessor's caller.
"""

from __future__ import annotations

import typing
from typing import Any

from pydantic import BaseModel, PydanticSchemaGenerationError, PydanticUserError, TypeAdapter

from typedstore.types.base import BaseCaster


class PydanticCaster(BaseCaster):
    """Caster that validates values with a pydantic ``TypeAdapter``."""

    def __init__(self, type_: Any):
        if isinstance(type_, TypeAdapter):
            self.adapter = type_
            self.type = getattr(type_, "_type", Any)
        else:
            self.type = type_
            self.adapter = TypeAdapter(type_)

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"adapt({_type_name(self.type)})"

    def cast(self, value: Any) -> Any:
        if value is None:
            return None
        return self.adapter.validate_python(value)


def _type_name(type_: Any) -> str:
    if isinstance(type_, type):
        return type_.__name__
    return repr(type_).replace("typing.", "")


def is_adaptable(type_: Any) -> bool:
    """Whether ``type_`` looks like something pydantic can validate."""
    if isinstance(type_, TypeAdapter) or typing.get_origin(type_) is not None:
        return True
    if isinstance(type_, type):
        return issubclass(type_, BaseModel) or not issubclass(type_, BaseCaster)
    return False


def adapt(type_: Any) -> PydanticCaster:
    """Wrap ``type_`` in a :class:`PydanticCaster`.

    Raises ``TypeError`` when pydantic cannot build a schema for it.
    """
    try:
        caster = PydanticCaster(type_)
        caster.adapter.core_schema
    except (PydanticSchemaGenerationError, PydanticUserError, NameError) as e:
        raise TypeError(str(e)) from e
    return caster
