"""typedstore error types."""

from __future__ import annotations

from typing import Any


class TypedStoreError(Exception):
    """Base exception for typedstore."""

    pass


class DeclarationError(TypedStoreError):
    """Error in a typed store schema declaration."""

    pass


class UnsupportedTypeError(DeclarationError, TypeError):
    """A field was declared with a type that cannot be resolved to a caster."""

    def __init__(self, field: str, type_: Any, reason: str | None = None):
        self.field = field
        self.type = type_
        message = f"type <{type_!r}> for field '{field}' not supported"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CastError(TypedStoreError, ValueError):
    """A caster could not convert a raw value."""

    pass


class ConstraintError(CastError):
    """A cast value violates a declared constraint."""

    def __init__(self, rule: str, value: Any):
        self.rule = rule
        self.value = value
        super().__init__(f"{value!r} violates constraint '{rule}'")


class SymbolKeysDisallowed(TypedStoreError):
    """A guarded document was accessed with a non-string key."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Symbol keys are not allowed `{key!r}`")
