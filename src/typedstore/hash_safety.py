"""Non-string key guard for stored documents.

Stored documents are always string-keyed. Looking one up with any other
key (an int, an enum member, a tuple) is a programming error, so guarded
documents raise :class:`SymbolKeysDisallowed` instead of reporting a miss.

The guard is installed in one downward pass when a document is read from
storage. Dicts written into a document later by setters stay unguarded.
"""

from __future__ import annotations

from typing import Any

from typedstore.config import Settings, get_settings
from typedstore.core.errors import SymbolKeysDisallowed


class GuardedDict(dict):
    """A ``dict`` that rejects lookups by non-string keys."""

    __slots__ = ()

    def __missing__(self, key: Any) -> Any:
        if not isinstance(key, str):
            raise SymbolKeysDisallowed(key)
        raise KeyError(key)

    def get(self, key: Any, default: Any = None) -> Any:
        if not isinstance(key, str) and key not in self:
            raise SymbolKeysDisallowed(key)
        return super().get(key, default)

    def copy(self) -> GuardedDict:
        return GuardedDict(self)


def _guard(value: Any) -> Any:
    if isinstance(value, dict):
        guarded = value if isinstance(value, GuardedDict) else GuardedDict(value)
        for key, item in guarded.items():
            replacement = _guard(item)
            if replacement is not item:
                guarded[key] = replacement
        return guarded
    if isinstance(value, list):
        for index, item in enumerate(value):
            replacement = _guard(item)
            if replacement is not item:
                value[index] = replacement
    return value


def enforce(document: Any, settings: Settings | None = None) -> Any:
    """Guard ``document`` and every dict reachable from it.

    Returns the guarded document, which the caller stores in place of the
    original. Nested dicts are replaced inside their parents; lists are
    updated in place. With hash safety disabled the document is returned
    untouched.
    """
    settings = settings or get_settings()
    if not settings.guards_documents:
        return document
    return _guard(document)


def new_document(settings: Settings | None = None) -> dict[str, Any]:
    """Return an empty document, guarded when hash safety is on."""
    settings = settings or get_settings()
    return GuardedDict() if settings.guards_documents else {}
