from __future__ import annotations

import pytest
from pydantic import ValidationError

from baggage_manifest.core.config import Settings, get_settings


def test_settings_default_values() -> None:
    """Test that Settings have correct default values when no env vars are set."""
    get_settings.cache_clear()  # Ensure fresh instance
    settings = get_settings()

    assert settings.debug is False
    assert settings.lookahead_lines == 10
    assert settings.context_window_chars == 300
    assert settings.min_line_length == 5
    assert settings.header_min_length == 15


def test_settings_parsing_from_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that Settings correctly parse values from environment variables."""
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("LOOKAHEAD_LINES", "4")
    monkeypatch.setenv("CONTEXT_WINDOW_CHARS", "120")
    monkeypatch.setenv("MIN_LINE_LENGTH", "8")
    monkeypatch.setenv("HEADER_MIN_LENGTH", "10")

    get_settings.cache_clear()  # Reload settings from new env
    settings = get_settings()

    assert settings.debug is True
    assert settings.lookahead_lines == 4
    assert settings.context_window_chars == 120
    assert settings.min_line_length == 8
    assert settings.header_min_length == 10


def test_empty_debug_value_is_false(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "")

    assert Settings().debug is False


@pytest.mark.parametrize(
    "field",
    ["lookahead_lines", "context_window_chars", "min_line_length", "header_min_length"],
)
def test_tuning_values_must_be_positive(field: str) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


@pytest.mark.parametrize(
    "extension,expected",
    [
        ("pdf", True),
        (".PDF", True),
        ("xls", True),
        ("tsv", True),
        ("docx", False),
        ("", False),
    ],
)
def test_settings_is_extension_supported(extension: str, expected: bool) -> None:
    assert Settings().is_extension_supported(extension) is expected


def test_supported_extensions_match_registry() -> None:
    assert Settings().supported_extensions == {"pdf", "xlsx", "xls", "csv", "txt", "tsv"}


def test_get_settings_singleton_outside_pytest(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    get_settings.cache_clear()

    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_get_settings_fresh_under_pytest() -> None:
    assert get_settings() is not get_settings()
