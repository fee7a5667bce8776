"""Type casters for typed store fields.

Usage:
    from typedstore import types

    types.Integer.cast("123")                      # 123
    types.String.constrained(format=r"@")          # email-ish strings
    types.Bool.with_default(True)                  # defaulted boolean
    types.adapt(list[Parcel])                      # pydantic-backed caster
"""

from typedstore.types.adapters import PydanticCaster, adapt, is_adaptable
from typedstore.types.base import (
    BaseCaster,
    Caster,
    Constrained,
    Defaulted,
    FunctionCaster,
    custom,
)
from typedstore.types.primitives import (
    BooleanCaster,
    DateCaster,
    DateTimeCaster,
    DecimalCaster,
    FloatCaster,
    IntegerCaster,
    JSONCaster,
    StringCaster,
    TimeCaster,
    lookup_type,
    register_type,
    registered_types,
)

Integer = IntegerCaster()
Float = FloatCaster()
Decimal = DecimalCaster()
String = StringCaster()
Bool = BooleanCaster()
DateTime = DateTimeCaster()
Date = DateCaster()
Time = TimeCaster()
JSON = JSONCaster()

__all__ = [
    "BaseCaster",
    "Bool",
    "BooleanCaster",
    "Caster",
    "Constrained",
    "Date",
    "DateCaster",
    "DateTime",
    "DateTimeCaster",
    "Decimal",
    "DecimalCaster",
    "Defaulted",
    "Float",
    "FloatCaster",
    "FunctionCaster",
    "Integer",
    "IntegerCaster",
    "JSON",
    "JSONCaster",
    "PydanticCaster",
    "String",
    "StringCaster",
    "Time",
    "TimeCaster",
    "adapt",
    "custom",
    "is_adaptable",
    "lookup_type",
    "register_type",
    "registered_types",
]
