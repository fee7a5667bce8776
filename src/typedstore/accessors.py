"""Compiled field accessors.

Each declared field compiles to one accessor record holding the store
attribute, the field descriptor and three operations:

- ``get(host)``: decode the raw value through the caster, with caching
- ``set(host, value)``: encode a value into the document; ``None`` removes the key
- ``present(host)``: presence check on the raw value

Caching: the first read of a field records ``(last_raw, last_typed)`` on
the host instance. Later reads whose raw value is strictly equal to
``last_raw`` return the very same ``last_typed`` object. A cast value that
differs from its raw input is written back into the document, so in-place
mutation of the returned object (``record.tags.append("x")``,
``record.parcel.weight = 2``) is what the document holds and what gets saved.
This aliasing is intentional.

Accessors are not thread-safe. Hosts shared across threads must be
serialized by the caller.
"""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from typedstore.core.values import is_present, materialize, same_value
from typedstore.serialization import to_primitive

if TYPE_CHECKING:
    from typedstore.schema import FieldDescriptor
    from typedstore.store import StoreHost

# Instance __dict__ key holding the per-instance cache entries
CACHE_ATTR = "_typed_store_cache"


@dataclass
class CacheEntry:
    """Last raw value seen for a field and the typed value it decoded to."""

    last_raw: Any
    last_typed: Any


def cache_for(host: Any) -> dict[tuple[str, str], CacheEntry]:
    """Return the accessor cache owned by ``host``, creating it lazily."""
    return vars(host).setdefault(CACHE_ATTR, {})


def forget(host: Any, attribute: str) -> None:
    """Drop ``host``'s cache entries for the fields of ``attribute``."""
    cache = cache_for(host)
    for entry_key in [k for k in cache if k[0] == attribute]:
        del cache[entry_key]


def write_quietly(host: StoreHost, attribute: str, write: Callable[[], None]) -> None:
    """Run ``write`` without marking a clean document as changed.

    If the document was already changed, the write simply adds to that
    change. If it was clean, it is reset to clean after the write.
    """
    was_changed = host.store_attribute_changed(attribute)
    write()
    if not was_changed:
        host.clear_store_attribute_change(attribute)


@dataclass(frozen=True)
class FieldAccessor:
    """Accessor for a top-level field of a document."""

    store_attribute: str
    descriptor: FieldDescriptor

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def key(self) -> str:
        return self.descriptor.name

    def present(self, host: StoreHost) -> bool:
        return is_present(host.read_store_attribute(self.store_attribute, self.key))

    def get(self, host: StoreHost) -> Any:
        attribute, key = self.store_attribute, self.key
        cache = cache_for(host)
        val = host.read_store_attribute(attribute, key)

        if val is not None:
            entry = cache.get((attribute, key))
            if entry is not None and same_value(entry.last_raw, val):
                return entry.last_typed

            typed = self.descriptor.caster.cast(val)
            if typed is not None:
                if same_value(typed, val):
                    typed = val
                else:
                    host.write_store_attribute(attribute, key, typed)
                cache[(attribute, key)] = CacheEntry(val, typed)
                return typed
            # Blank raw value: the document never holds a null
            host.delete_store_attribute(attribute, key)
            cache.pop((attribute, key), None)

        if self.descriptor.default is None:
            return None
        value = materialize(self.descriptor.default)
        write_quietly(host, attribute, lambda: host.write_store_attribute(attribute, key, value))
        cache[(attribute, key)] = CacheEntry(value, value)
        return value

    def set(self, host: StoreHost, value: Any) -> None:
        casted = None if value is None else self.descriptor.caster.cast(value)
        if casted is None:
            host.delete_store_attribute(self.store_attribute, self.key)
        else:
            host.write_store_attribute(self.store_attribute, self.key, casted)

    def was(self, host: StoreHost) -> Any:
        """Raw value of the field as of the host's last snapshot."""
        return host.store_attribute_was(self.store_attribute, self.key)

    def changed(self, host: StoreHost) -> bool:
        current = host.read_store_attribute(self.store_attribute, self.key)
        return to_primitive(current) != self.was(host)


@dataclass(frozen=True)
class NestedFieldAccessor:
    """Accessor for a field inside a parent field's sub-dict.

    ``path`` lists the parent keys from the document root down. Nested
    accessors are not cached: the top-level parent's cache already pins
    the sub-dict's identity, so reads go straight through it.
    """

    store_attribute: str
    path: tuple[str, ...]
    descriptor: FieldDescriptor

    @property
    def name(self) -> str:
        return "_".join((*self.path, self.descriptor.name))

    @property
    def key(self) -> str:
        return self.descriptor.name

    def _container(self, host: StoreHost, create: bool = False) -> MutableMapping | None:
        parent_key, *rest = self.path
        container = host.read_store_attribute(self.store_attribute, parent_key)
        if container is None:
            if not create:
                return None
            container = {}
            host.write_store_attribute(self.store_attribute, parent_key, container)
        for key in rest:
            if not isinstance(container, MutableMapping):
                break
            child = container.get(key)
            if child is None:
                if not create:
                    return None
                child = container[key] = {}
            container = child
        if not isinstance(container, MutableMapping):
            if create:
                raise TypeError(
                    f"Cannot write '{self.name}': '{'.'.join(self.path)}' holds "
                    f"{type(container).__name__}, not a mapping"
                )
            return None
        return container

    def present(self, host: StoreHost) -> bool:
        container = self._container(host)
        return container is not None and is_present(container.get(self.key))

    def get(self, host: StoreHost) -> Any:
        container = self._container(host)
        val = None if container is None else container.get(self.key)

        if val is not None:
            typed = self.descriptor.caster.cast(val)
            if typed is not None:
                if same_value(typed, val):
                    return val
                container[self.key] = typed
                return typed
            container.pop(self.key, None)

        if self.descriptor.default is None:
            return None
        value = materialize(self.descriptor.default)

        def write() -> None:
            self._container(host, create=True)[self.key] = value

        write_quietly(host, self.store_attribute, write)
        return value

    def set(self, host: StoreHost, value: Any) -> None:
        casted = None if value is None else self.descriptor.caster.cast(value)
        if casted is None:
            container = self._container(host)
            if container is not None:
                container.pop(self.key, None)
            return
        self._container(host, create=True)[self.key] = casted
