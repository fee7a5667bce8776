"""Schema declaration for typed stores.

Usage:
    from typedstore import declare, types

    schema = declare("params")
    schema.field("task_id", "integer")
    schema.field("notify_at", "datetime")
    schema.field("asap", "boolean", default=False)
    schema.field("email", types.String.constrained(format=r"@"))

    with schema.nested("settings") as settings:
        settings.field("tariff_id", "integer")

    accessors = schema.build()   # {"task_id": FieldAccessor, ..., "settings_tariff_id": ...}

Type resolution happens in :meth:`Schema.field`, so a misconfigured field
fails when the schema is declared, before any record exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from typedstore.accessors import FieldAccessor, NestedFieldAccessor
from typedstore.config import Settings, get_settings
from typedstore.core.errors import DeclarationError, UnsupportedTypeError
from typedstore.types import BaseCaster, Caster, adapt, is_adaptable, lookup_type, registered_types

if TYPE_CHECKING:
    from typedstore.store import StoreHost

logger = logging.getLogger(__name__)

Accessor = FieldAccessor | NestedFieldAccessor
AccessorTable = Mapping[str, Accessor]


@dataclass(frozen=True)
class FieldDescriptor:
    """One declared field: name, caster, default and optional sub-schema."""

    name: str
    caster: Caster
    default: Any = None
    nested: Schema | None = None
    declared_type: Any = None


def resolve_caster(name: str, type_: Any, options: dict[str, Any]) -> Caster:
    """Resolve a declared field type to a caster.

    Accepts a registered type tag (built with ``options``), a caster
    instance, a caster class (instantiated with ``options``), or anything
    pydantic can validate (models, ``TypeAdapter``, typing constructs).
    """
    if isinstance(type_, str):
        if type_ not in registered_types():
            raise UnsupportedTypeError(name, type_, "unknown type tag")
        try:
            return lookup_type(type_, **options)
        except TypeError as e:
            raise UnsupportedTypeError(name, type_, str(e)) from e

    if isinstance(type_, type) and issubclass(type_, BaseCaster):
        try:
            return type_(**options)
        except TypeError as e:
            raise UnsupportedTypeError(name, type_, str(e)) from e

    if options:
        raise UnsupportedTypeError(
            name, type_, f"options {sorted(options)} are only accepted with type tags"
        )

    if not isinstance(type_, type) and isinstance(type_, Caster):
        return type_

    if is_adaptable(type_):
        try:
            return adapt(type_)
        except TypeError as e:
            raise UnsupportedTypeError(name, type_, str(e)) from e

    raise UnsupportedTypeError(name, type_)


class Schema:
    """Field declarations for one document attribute.

    Holds the declared :class:`FieldDescriptor` objects and compiles them
    into an :data:`AccessorTable` on :meth:`build`. A built schema is sealed;
    further declarations raise :class:`DeclarationError`.
    """

    def __init__(self, store_attribute: str, settings: Settings | None = None):
        self.store_attribute = store_attribute
        self.settings = settings or get_settings()
        self._fields: dict[str, FieldDescriptor] = {}
        self._table: AccessorTable | None = None
        self._sealed = False

    def __repr__(self) -> str:
        return f"Schema({self.store_attribute!r}, fields={list(self._fields)})"

    @property
    def fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(self._fields.values())

    def field(
        self,
        name: str,
        type: Any,
        default: Any = None,
        *,
        block: Callable[[Schema], None] | None = None,
        **options: Any,
    ) -> FieldDescriptor:
        """Declare a field.

        Args:
            name: Key in the document and name of the generated accessor.
            type: Type tag, caster, caster class or pydantic-adaptable type.
            default: Value materialized on first read of a missing field.
                Callables are called; other values are deep-copied.
            block: Called with a child schema to declare nested fields,
                exposed as ``{name}_{child}`` accessors.
            **options: Options for the caster registered under a type tag.
        """
        self._check_declarable(name)
        nested = None
        if block is not None:
            nested = Schema(self.store_attribute, self.settings)
            block(nested)
        return self._add(name, type, default, nested, options)

    @contextmanager
    def nested(
        self, name: str, type: Any = "json", default: Any = None, **options: Any
    ) -> Iterator[Schema]:
        """Declare a field holding a sub-dict of nested fields.

        Usage::

            with schema.nested("settings") as settings:
                settings.field("tariff_id", "integer")
        """
        self._check_declarable(name)
        child = Schema(self.store_attribute, self.settings)
        yield child
        self._add(name, type, default, child, options)

    def _check_declarable(self, name: str) -> None:
        if self._sealed:
            raise DeclarationError(
                f"Schema for '{self.store_attribute}' is already built; cannot add '{name}'"
            )
        if not name.isidentifier():
            raise DeclarationError(f"Field name {name!r} is not a valid identifier")
        if name in self._fields:
            raise DeclarationError(
                f"Field '{name}' is already declared on '{self.store_attribute}'"
            )

    def _add(
        self,
        name: str,
        type_: Any,
        default: Any,
        nested: Schema | None,
        options: dict[str, Any],
    ) -> FieldDescriptor:
        self._check_declarable(name)
        caster = resolve_caster(name, type_, options)
        if default is None and caster.has_default:
            default = caster.default
        descriptor = FieldDescriptor(
            name=name,
            caster=caster,
            default=default,
            nested=nested,
            declared_type=type_,
        )
        self._fields[name] = descriptor
        return descriptor

    def _seal(self) -> None:
        self._sealed = True
        for descriptor in self._fields.values():
            if descriptor.nested is not None:
                descriptor.nested._seal()

    def _nested_accessors(self, path: tuple[str, ...]) -> Iterator[NestedFieldAccessor]:
        for descriptor in self._fields.values():
            yield NestedFieldAccessor(self.store_attribute, path, descriptor)
            if descriptor.nested is not None:
                yield from descriptor.nested._nested_accessors((*path, descriptor.name))

    def build(self) -> AccessorTable:
        """Compile the declared fields into a read-only accessor table."""
        if self._table is not None:
            return self._table

        accessors: dict[str, Accessor] = {}
        for descriptor in self._fields.values():
            compiled: list[Accessor] = [FieldAccessor(self.store_attribute, descriptor)]
            if descriptor.nested is not None:
                compiled.extend(descriptor.nested._nested_accessors((descriptor.name,)))
            for accessor in compiled:
                if accessor.name in accessors:
                    raise DeclarationError(
                        f"Accessor '{accessor.name}' is declared twice on '{self.store_attribute}'"
                    )
                accessors[accessor.name] = accessor

        self._seal()
        self._table = MappingProxyType(accessors)
        logger.debug(
            "Built typed store '%s' with %d accessor(s): %s",
            self.store_attribute,
            len(accessors),
            ", ".join(accessors),
        )
        return self._table

    def install(self, host_cls: type) -> type:
        """Build the schema and attach its accessors to ``host_cls``."""
        from typedstore.store import install

        return install(host_cls, self)

    def accessor(self, name: str) -> Accessor:
        """Look up a compiled accessor by name."""
        return self.build()[name]

    def read(self, host: StoreHost, name: str) -> Any:
        return self.accessor(name).get(host)

    def write(self, host: StoreHost, name: str, value: Any) -> None:
        self.accessor(name).set(host, value)

    def present(self, host: StoreHost, name: str) -> bool:
        return self.accessor(name).present(host)


def declare(store_attribute: str, settings: Settings | None = None) -> Schema:
    """Start a schema for the document stored in ``store_attribute``."""
    return Schema(store_attribute, settings=settings)
