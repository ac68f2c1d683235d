from __future__ import annotations

import os
from typing import FrozenSet, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Parser tuning knobs, loaded from environment variables or a ``.env`` file.

    The lookahead and context-window sizes come from observed exports rather
    than from any format definition, so they are exposed here instead of being
    hardcoded in the grammars.
    """

    debug: bool = False

    # Multi-line bare-tag grammar: how many lines after the tag may belong to it.
    lookahead_lines: int = Field(default=10, ge=1)
    # Salvage pass: characters of context read after each tag.
    context_window_chars: int = Field(default=300, ge=1)
    # Skip rule: trimmed lines shorter than this never carry a record.
    min_line_length: int = Field(default=5, ge=1)
    # Header heuristic: trimmed lines shorter than this are treated as headers.
    header_min_length: int = Field(default=15, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter=None,
    )

    @field_validator("debug", mode="before")
    @classmethod
    def _coerce_debug(cls, v: object) -> object:
        """Treat an empty ``DEBUG=`` assignment as *False* instead of failing."""
        if isinstance(v, str) and not v.strip():
            return False
        return v

    @property
    def supported_extensions(self) -> FrozenSet[str]:
        """Lower-case extensions (no dot) that route to a manifest parser."""
        # Imported lazily: the registry imports the parsers, which import us.
        from baggage_manifest.parsing.registry import SUPPORTED_EXTENSIONS

        return SUPPORTED_EXTENSIONS

    def is_extension_supported(self, extension: str) -> bool:
        """
        Check whether a file extension has a dedicated manifest handler.

        Args:
            extension: The file extension to check (with or without leading dot)

        Returns:
            True if the extension routes to a parser, False otherwise
        """
        if not extension:
            return False

        clean_ext = extension.lower().lstrip(".")
        return clean_ext in self.supported_extensions


# Public accessor – manual caching to support special behaviour in tests
_CACHED_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:  # noqa: D401 – accessor helper
    """Return a **singleton** Settings instance unless running under pytest.

    Tests frequently tweak environment variables between cases, so while
    ``PYTEST_CURRENT_TEST`` is present every call builds a fresh instance.
    """

    global _CACHED_SETTINGS  # noqa: PLW0603 – module-level singleton

    if "PYTEST_CURRENT_TEST" in os.environ:
        return Settings()

    if _CACHED_SETTINGS is None:
        _CACHED_SETTINGS = Settings()

    return _CACHED_SETTINGS


def _clear_settings_cache() -> None:  # noqa: D401 – helper for tests
    """Clear the internal Settings singleton (used by unit-tests)."""

    global _CACHED_SETTINGS
    _CACHED_SETTINGS = None


get_settings.cache_clear = _clear_settings_cache  # type: ignore[attr-defined]
