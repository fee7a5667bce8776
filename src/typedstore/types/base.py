"""Caster protocol and the composable caster variants.

A caster turns a raw stored value into a typed value. Every caster used by
a schema satisfies :class:`Caster`; third-party casting libraries are
adapted to it at the boundary (see :mod:`typedstore.types.adapters`).
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Container
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from typedstore.core.errors import ConstraintError


@runtime_checkable
class Caster(Protocol):
    """Protocol for type casters."""

    @property
    def has_default(self) -> bool: ...

    @property
    def default(self) -> Any: ...

    def cast(self, value: Any) -> Any: ...


class BaseCaster(ABC):
    """Abstract base class for casters.

    Subclasses implement :meth:`cast`. The fluent builders wrap a caster in
    a constrained or defaulted variant without changing the original.
    """

    name: str = "value"

    @property
    def has_default(self) -> bool:
        return False

    @property
    def default(self) -> Any:
        return None

    @abstractmethod
    def cast(self, value: Any) -> Any:
        """Convert ``value`` or raise ``CastError``."""
        ...

    def constrained(self, **rules: Any) -> Constrained:
        """Return a caster that checks ``rules`` after casting.

        Usage::

            email = String.constrained(format=r"@")
            port = Integer.constrained(gteq=1, lteq=65535)
        """
        return Constrained(self, rules)

    def with_default(self, value: Any) -> Defaulted:
        """Return a caster carrying ``value`` as its default."""
        return Defaulted(self, value)

    def __repr__(self) -> str:
        return self.name


_RULES: dict[str, Callable[[Any, Any], bool]] = {
    "format": lambda value, pattern: re.search(pattern, str(value)) is not None,
    "min_size": lambda value, size: len(value) >= size,
    "max_size": lambda value, size: len(value) <= size,
    "gt": lambda value, bound: value > bound,
    "gteq": lambda value, bound: value >= bound,
    "lt": lambda value, bound: value < bound,
    "lteq": lambda value, bound: value <= bound,
    "included_in": lambda value, options: value in options,
}


@dataclass(repr=False)
class Constrained(BaseCaster):
    """Caster that validates the wrapped caster's output against rules."""

    wrapped: Caster
    rules: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        unknown = sorted(set(self.rules) - set(_RULES))
        if unknown:
            raise ValueError(f"Unknown constraint(s): {', '.join(unknown)}")
        included = self.rules.get("included_in")
        if included is not None and not isinstance(included, Container):
            raise ValueError("Constraint 'included_in' must be a container")

    @property
    def name(self) -> str:  # type: ignore[override]
        rules = ", ".join(f"{k}={v!r}" for k, v in self.rules.items())
        return f"{self.wrapped!r}.constrained({rules})"

    @property
    def has_default(self) -> bool:
        return self.wrapped.has_default

    @property
    def default(self) -> Any:
        return self.wrapped.default

    def cast(self, value: Any) -> Any:
        result = self.wrapped.cast(value)
        if result is None:
            return None
        for rule, argument in self.rules.items():
            try:
                ok = _RULES[rule](result, argument)
            except TypeError:
                ok = False
            if not ok:
                raise ConstraintError(f"{rule}={argument!r}", result)
        return result


@dataclass(repr=False)
class Defaulted(BaseCaster):
    """Caster that carries a schema-level default for the wrapped caster.

    A callable default is treated as a factory and called on every
    materialization.
    """

    wrapped: Caster
    value: Any = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"{self.wrapped!r}.with_default({self.value!r})"

    @property
    def has_default(self) -> bool:
        return self.value is not None

    @property
    def default(self) -> Any:
        return self.value

    def cast(self, value: Any) -> Any:
        return self.wrapped.cast(value)


@dataclass(repr=False)
class FunctionCaster(BaseCaster):
    """Caster backed by a user-supplied function."""

    fn: Callable[[Any], Any]

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"custom({getattr(self.fn, '__name__', repr(self.fn))})"

    def cast(self, value: Any) -> Any:
        return self.fn(value)


def custom(fn: Callable[[Any], Any]) -> FunctionCaster:
    """Wrap a plain function as a caster."""
    return FunctionCaster(fn)
