"""Host glue: attach typed store accessors to record classes.

A host is any object that keeps a document in an attribute and implements
:class:`StoreHost`. :class:`TypedStoreMixin` provides that implementation
for plain attributes, with snapshot-based change tracking; the SQLAlchemy
integration in :mod:`typedstore.db` builds on it.

Usage:
    class Task(TypedStoreMixin):
        def __init__(self, params=None):
            self.params = params

    with typed_store(Task, "params") as s:
        s.field("task_id", "integer")
        s.field("asap", "boolean", default=False)

    task = Task()
    task.task_id = "123"
    task.task_id          # 123
    task.has_task_id()    # True
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, ClassVar, Protocol, runtime_checkable

from typedstore.accessors import FieldAccessor, forget
from typedstore.config import Settings
from typedstore.core.errors import DeclarationError
from typedstore.core.values import same_value
from typedstore.hash_safety import enforce, new_document
from typedstore.schema import Accessor, Schema, declare
from typedstore.serialization import to_primitive

# Instance __dict__ key holding the change-tracking snapshots
SNAPSHOT_ATTR = "_typed_store_snapshots"


@runtime_checkable
class StoreHost(Protocol):
    """Protocol for objects that hold typed store documents."""

    def read_store_attribute(self, attribute: str, key: str) -> Any: ...

    def write_store_attribute(self, attribute: str, key: str, value: Any) -> None: ...

    def delete_store_attribute(self, attribute: str, key: str) -> None: ...

    def store_attribute_changed(self, attribute: str) -> bool: ...

    def clear_store_attribute_change(self, attribute: str) -> None: ...

    def store_attribute_was(self, attribute: str, key: str) -> Any: ...


class TypedStoreMixin:
    """StoreHost implementation over plain instance attributes.

    A document counts as changed when its JSON-primitive form differs from
    the snapshot taken at load time, at the last persist, or by
    :meth:`clear_store_attribute_change`. A missing document counts as ``{}``.
    """

    __typed_stores__: ClassVar[dict[str, Schema]] = {}

    def typed_store_document(self, attribute: str) -> dict[str, Any]:
        """Return the document for ``attribute``, creating an empty one if unset."""
        document = getattr(self, attribute, None)
        if document is None:
            document = new_document(type(self).__typed_stores__[attribute].settings)
            self._assign_store_document(attribute, document)
        return document

    def _assign_store_document(self, attribute: str, document: dict[str, Any]) -> None:
        setattr(self, attribute, document)

    def read_store_attribute(self, attribute: str, key: str) -> Any:
        return self.typed_store_document(attribute).get(key)

    def write_store_attribute(self, attribute: str, key: str, value: Any) -> None:
        document = self.typed_store_document(attribute)
        if key in document and same_value(document[key], value):
            return
        document[key] = value

    def delete_store_attribute(self, attribute: str, key: str) -> None:
        self.typed_store_document(attribute).pop(key, None)

    def _store_snapshots(self) -> dict[str, Any]:
        return vars(self).setdefault(SNAPSHOT_ATTR, {})

    def store_attribute_changed(self, attribute: str) -> bool:
        current = to_primitive(getattr(self, attribute, None) or {})
        return current != self._store_snapshots().get(attribute, {})

    def clear_store_attribute_change(self, attribute: str) -> None:
        self._store_snapshots()[attribute] = to_primitive(getattr(self, attribute, None) or {})

    def store_attribute_was(self, attribute: str, key: str) -> Any:
        return self._store_snapshots().get(attribute, {}).get(key)

    def typed_stores_changed(self) -> bool:
        """Whether any typed store document differs from its snapshot."""
        return any(self.store_attribute_changed(a) for a in self._loaded_store_attributes())

    def _loaded_store_attributes(self) -> list[str]:
        return list(type(self).__typed_stores__)

    def load_typed_stores(self, attributes: Iterable[str] | None = None) -> None:
        """Guard and snapshot documents just read from storage.

        ``attributes`` limits the pass to the store attributes that were
        actually read; documents not listed keep their pending changes.
        """
        loaded = self._loaded_store_attributes()
        if attributes is not None:
            wanted = set(attributes)
            loaded = [a for a in loaded if a in wanted]
        for attribute in loaded:
            schema = type(self).__typed_stores__[attribute]
            document = getattr(self, attribute, None)
            if document is not None:
                guarded = enforce(document, schema.settings)
                if guarded is not document:
                    self._assign_store_document(attribute, guarded)
            forget(self, attribute)
            self.clear_store_attribute_change(attribute)

    def commit_typed_stores(self) -> None:
        """Snapshot documents after they were persisted."""
        for attribute in self._loaded_store_attributes():
            self.clear_store_attribute_change(attribute)


class TypedAttribute:
    """Data descriptor exposing one compiled accessor as an attribute."""

    def __init__(self, accessor: Accessor):
        self.accessor = accessor

    def __repr__(self) -> str:
        return f"<TypedAttribute {self.accessor.store_attribute}.{self.accessor.name}>"

    def __get__(self, instance: Any, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return self.accessor.get(instance)

    def __set__(self, instance: Any, value: Any) -> None:
        self.accessor.set(instance, value)


def _predicate(accessor: Accessor):
    def predicate(self) -> bool:
        return accessor.present(self)

    predicate.__name__ = f"has_{accessor.name}"
    predicate.__doc__ = f"Whether '{accessor.name}' holds a present value."
    return predicate


def _was(accessor: FieldAccessor) -> property:
    return property(accessor.was, doc=f"Stored value of '{accessor.name}' at the last snapshot.")


def _changed(accessor: FieldAccessor):
    def changed(self) -> bool:
        return accessor.changed(self)

    changed.__name__ = f"{accessor.name}_changed"
    return changed


_HOST_METHODS = (
    "read_store_attribute",
    "write_store_attribute",
    "delete_store_attribute",
    "store_attribute_changed",
    "clear_store_attribute_change",
    "store_attribute_was",
)


def install(host_cls: type, schema: Schema) -> type:
    """Attach ``schema``'s accessors to ``host_cls`` and register the schema.

    Per accessor ``f`` this adds the ``f`` attribute, the ``has_f()``
    predicate and, for top-level fields, ``f_was`` and ``f_changed()``.
    """
    missing = [name for name in _HOST_METHODS if not callable(getattr(host_cls, name, None))]
    if missing:
        raise DeclarationError(
            f"{host_cls.__name__} does not implement the store host protocol "
            f"(missing: {', '.join(missing)})"
        )

    table = schema.build()
    for name in table:
        existing = host_cls.__dict__.get(name)
        if existing is not None and not isinstance(existing, TypedAttribute):
            raise DeclarationError(
                f"{host_cls.__name__}.{name} already exists; cannot install typed accessor"
            )

    for name, accessor in table.items():
        setattr(host_cls, name, TypedAttribute(accessor))
        setattr(host_cls, f"has_{name}", _predicate(accessor))
        if isinstance(accessor, FieldAccessor):
            setattr(host_cls, f"{name}_was", _was(accessor))
            setattr(host_cls, f"{name}_changed", _changed(accessor))

    stores = dict(getattr(host_cls, "__typed_stores__", {}))
    stores[schema.store_attribute] = schema
    host_cls.__typed_stores__ = stores
    return host_cls


@contextmanager
def typed_store(
    host_cls: type, store_attribute: str, settings: Settings | None = None
) -> Iterator[Schema]:
    """Declare a typed store on ``host_cls``; accessors are installed on exit.

    Usage::

        with typed_store(Task, "params") as s:
            s.field("task_id", "integer")
            with s.nested("settings") as settings:
                settings.field("tariff_id", "integer")
    """
    schema = declare(store_attribute, settings=settings)
    yield schema
    install(host_cls, schema)
