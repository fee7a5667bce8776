"""Primitive casters and the type tag registry.

Maps string tags (``"integer"``, ``"datetime"``, ...) to caster factories.
Field declarations resolve tags through :func:`lookup_type`; applications
register their own tags with :func:`register_type`.
"""

from __future__ import annotations

import datetime as dt
import decimal
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from typedstore.core.errors import CastError
from typedstore.types.base import BaseCaster, Caster

logger = logging.getLogger(__name__)

# Registry: tag -> caster factory taking the declaration's options
_TYPES: dict[str, Callable[..., Caster]] = {}


def register_type(*tags: str):
    """Decorator to register a caster factory under one or more tags.

    Usage::

        @register_type("parcel")
        class ParcelCaster(BaseCaster):
            ...
    """

    def decorator(factory: Callable[..., Caster]):
        for tag in tags:
            _TYPES[tag] = factory
            logger.debug("Registered type tag %r -> %r", tag, factory)
        return factory

    return decorator


def lookup_type(tag: str, **options: Any) -> Caster:
    """Build the caster registered under ``tag`` with ``options``.

    Raises ``KeyError`` for an unknown tag and ``TypeError`` for options
    the caster does not accept.
    """
    return _TYPES[tag](**options)


def registered_types() -> set[str]:
    """Return the set of all registered tags."""
    return set(_TYPES)


def _is_blank(value: Any) -> bool:
    return isinstance(value, str) and not value.strip()


FALSE_VALUES = frozenset({"0", "f", "F", "false", "FALSE", "off", "OFF"})


@register_type("integer", "int")
@dataclass(frozen=True, repr=False)
class IntegerCaster(BaseCaster):
    name = "integer"

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        try:
            if isinstance(value, str):
                return int(decimal.Decimal(value.strip()))
            return int(value)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise CastError(f"Cannot cast {value!r} to integer") from e


@register_type("float")
@dataclass(frozen=True, repr=False)
class FloatCaster(BaseCaster):
    name = "float"

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        try:
            return float(value)
        except (ValueError, TypeError) as e:
            raise CastError(f"Cannot cast {value!r} to float") from e


@register_type("decimal")
@dataclass(frozen=True, repr=False)
class DecimalCaster(BaseCaster):
    scale: int | None = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return "decimal" if self.scale is None else f"decimal(scale={self.scale})"

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        try:
            result = value if isinstance(value, decimal.Decimal) else decimal.Decimal(str(value))
        except (ValueError, ArithmeticError) as e:
            raise CastError(f"Cannot cast {value!r} to decimal") from e
        if self.scale is not None:
            result = result.quantize(decimal.Decimal(1).scaleb(-self.scale))
        return result


@register_type("string", "str")
@dataclass(frozen=True, repr=False)
class StringCaster(BaseCaster):
    strip: bool = False

    @property
    def name(self) -> str:  # type: ignore[override]
        return "string(strip=True)" if self.strip else "string"

    def cast(self, value: Any) -> Any:
        if value is None:
            return None
        if value is True:
            return "t"
        if value is False:
            return "f"
        result = value if isinstance(value, str) else str(value)
        return result.strip() if self.strip else result


@register_type("boolean", "bool")
@dataclass(frozen=True, repr=False)
class BooleanCaster(BaseCaster):
    name = "boolean"

    def cast(self, value: Any) -> Any:
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value == 0:
            return False
        return not (isinstance(value, str) and value in FALSE_VALUES)


def _parse_iso(value: str, parser: Callable[[str], Any], kind: str) -> Any:
    text = value.strip()
    if text.endswith(" UTC"):
        text = text[: -len(" UTC")] + "+00:00"
    try:
        return parser(text)
    except ValueError as e:
        raise CastError(f"Cannot cast {value!r} to {kind}") from e


@register_type("datetime")
@dataclass(frozen=True, repr=False)
class DateTimeCaster(BaseCaster):
    """Datetime caster; ``timezone`` is attached to naive results."""

    timezone: str | None = None

    def __post_init__(self):
        if self.timezone is not None and self.timezone.lower() != "utc":
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise TypeError(f"Unknown timezone {self.timezone!r}") from e

    @property
    def name(self) -> str:  # type: ignore[override]
        return "datetime" if self.timezone is None else f"datetime(timezone={self.timezone!r})"

    def _tzinfo(self) -> dt.tzinfo | None:
        if self.timezone is None:
            return None
        if self.timezone.lower() == "utc":
            return dt.timezone.utc
        return ZoneInfo(self.timezone)

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        if isinstance(value, dt.datetime):
            result = value
        elif isinstance(value, dt.date):
            result = dt.datetime.combine(value, dt.time())
        elif isinstance(value, str):
            result = _parse_iso(value, dt.datetime.fromisoformat, "datetime")
        else:
            raise CastError(f"Cannot cast {value!r} to datetime")
        tzinfo = self._tzinfo()
        if tzinfo is not None and result.tzinfo is None:
            result = result.replace(tzinfo=tzinfo)
        return result


@register_type("date")
@dataclass(frozen=True, repr=False)
class DateCaster(BaseCaster):
    name = "date"

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        if isinstance(value, dt.datetime):
            return value.date()
        if isinstance(value, dt.date):
            return value
        if isinstance(value, str):
            return _parse_iso(value, dt.date.fromisoformat, "date")
        raise CastError(f"Cannot cast {value!r} to date")


@register_type("time")
@dataclass(frozen=True, repr=False)
class TimeCaster(BaseCaster):
    name = "time"

    def cast(self, value: Any) -> Any:
        if value is None or _is_blank(value):
            return None
        if isinstance(value, dt.datetime):
            return value.time()
        if isinstance(value, dt.time):
            return value
        if isinstance(value, str):
            return _parse_iso(value, dt.time.fromisoformat, "time")
        raise CastError(f"Cannot cast {value!r} to time")


@register_type("json")
@dataclass(frozen=True, repr=False)
class JSONCaster(BaseCaster):
    """Passthrough caster for JSON blobs; ``decode`` parses string input."""

    decode: bool = False

    @property
    def name(self) -> str:  # type: ignore[override]
        return "json(decode=True)" if self.decode else "json"

    def cast(self, value: Any) -> Any:
        if self.decode and isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise CastError(f"Cannot decode {value!r} as JSON") from e
        return value
