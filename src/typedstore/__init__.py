"""typedstore - typed, cached field accessors over JSON documents.

Usage:
    from typedstore import TypedStoreMixin, typed_store, types

    class Task(TypedStoreMixin):
        params = None

    with typed_store(Task, "params") as s:
        s.field("task_id", "integer")
        s.field("notify_at", "datetime")
        s.field("asap", "boolean", default=False)
        s.field("email", types.String.constrained(format=r"@"))
        with s.nested("settings") as settings:
            settings.field("tariff_id", "integer")

    task = Task()
    task.task_id = "123"
    task.task_id                  # 123
    task.asap                     # False, materialized without marking params changed
    task.settings_tariff_id = "7"
    task.params                   # {"task_id": 123, "asap": False, "settings": {"tariff_id": 7}}
"""

from typedstore import types
from typedstore.accessors import CacheEntry, FieldAccessor, NestedFieldAccessor
from typedstore.config import HashSafety, Settings, get_settings, reset_settings
from typedstore.core.errors import (
    CastError,
    ConstraintError,
    DeclarationError,
    SymbolKeysDisallowed,
    TypedStoreError,
    UnsupportedTypeError,
)
from typedstore.hash_safety import GuardedDict, enforce
from typedstore.schema import AccessorTable, FieldDescriptor, Schema, declare
from typedstore.store import StoreHost, TypedAttribute, TypedStoreMixin, install, typed_store

__all__ = [
    "AccessorTable",
    "CacheEntry",
    "CastError",
    "ConstraintError",
    "DeclarationError",
    "FieldAccessor",
    "FieldDescriptor",
    "GuardedDict",
    "HashSafety",
    "NestedFieldAccessor",
    "Schema",
    "Settings",
    "StoreHost",
    "SymbolKeysDisallowed",
    "TypedAttribute",
    "TypedStoreError",
    "TypedStoreMixin",
    "UnsupportedTypeError",
    "declare",
    "enforce",
    "get_settings",
    "install",
    "reset_settings",
    "typed_store",
    "types",
]

__version__ = "0.1.0"

