"""Shared test fixtures for typedstore."""

from __future__ import annotations

import pytest

from typedstore import TypedStoreMixin, reset_settings


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Each test starts from default settings, ignoring the environment."""
    monkeypatch.delenv("TYPEDSTORE_HASH_SAFETY", raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def host_class():
    """A fresh host class per test, so installed accessors never leak."""

    class Task(TypedStoreMixin):
        def __init__(self, params=None):
            self.params = params
            # Behave like a record just read from storage
            self.load_typed_stores()

    return Task
