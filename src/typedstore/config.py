"""Configuration settings for typedstore.

Settings are read once and passed explicitly into schema declarations;
``get_settings()`` only supplies the default when a caller passes none.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HashSafety(str, Enum):
    """Policy for non-string key access on stored documents."""

    DISALLOW_SYMBOL_KEYS = "disallow_symbol_keys"
    DISABLED = "disabled"


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TYPEDSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    hash_safety: HashSafety = Field(default=HashSafety.DISALLOW_SYMBOL_KEYS)

    @property
    def guards_documents(self) -> bool:
        """Whether loaded documents get the non-string key guard."""
        return self.hash_safety is HashSafety.DISALLOW_SYMBOL_KEYS


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings cache (useful for testing)."""
    global _settings
    _settings = None
