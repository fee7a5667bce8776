"""Value comparison and presence helpers shared by accessors and hosts."""

from __future__ import annotations

import copy
from collections.abc import Sized
from typing import Any


def _kind(value: Any) -> type:
    # Guarded documents are dict subclasses and still compare as dicts
    return dict if isinstance(value, dict) else type(value)


def same_value(a: Any, b: Any) -> bool:
    """Strict value equality: same type and ``==``.

    Plain ``==`` treats ``True == 1`` and ``1 == 1.0`` as equal, which would
    let a boolean or float caster keep the raw int it was given.
    """
    return _kind(a) is _kind(b) and a == b


def is_present(value: Any) -> bool:
    """Presence check: ``None``, ``False``, blank strings and empty
    collections are absent; everything else is present."""
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, Sized):
        return len(value) > 0
    return True


def materialize(default: Any) -> Any:
    """Return a fresh instance of ``default``.

    Callables (model classes, ``dict``, lambdas) are called; anything else
    is deep-copied so no two records share one default object.
    """
    if callable(default):
        return default()
    return copy.deepcopy(default)
