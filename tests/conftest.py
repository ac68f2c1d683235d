# ruff: noqa: E402
from __future__ import annotations

import sys
from pathlib import Path

# Ensure repository root is first on sys.path
_repo_root: Path = Path(__file__).resolve().parent.parent  # tests/ -> repo root
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import base64

import pytest


@pytest.fixture(autouse=True)
def _disable_dotenv(monkeypatch):
    """Prevent the Settings class from reading the developer *.env* file.

    Unit-tests must operate against a *clean* environment.  The fixture patches
    ``Settings.model_config['env_file']`` to ``None`` so that Pydantic skips
    dotenv processing entirely, and removes the tuning variables most often
    used in default-value assertions unless a test sets them explicitly.
    """

    from baggage_manifest.core.config import Settings  # Imported here to avoid circularity

    monkeypatch.setitem(Settings.model_config, "env_file", None)

    for name in (
        "DEBUG",
        "LOOKAHEAD_LINES",
        "CONTEXT_WINDOW_CHARS",
        "MIN_LINE_LENGTH",
        "HEADER_MIN_LENGTH",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def b64():
    """Encode bytes or text the way the upload client sends binary files."""

    def _encode(data: bytes | str) -> str:
        raw = data.encode("utf-8") if isinstance(data, str) else data
        return base64.b64encode(raw).decode("ascii")

    return _encode


@pytest.fixture
def sita_report() -> str:
    """Excerpt of a SITA BagManager export after PDF text extraction."""

    return "\n".join(
        [
            "SITA BagManager - Departure Flight DT123 FIH",
            "Page 1 of 2",
            "Bag Information   Class Route   Passenger",
            "0DT357756 Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y",
            "0DT357757 Econ NBJ* FIH MBUYI K7XQ2P 18 Expected",
            "0DT357758 Y NBJ FIH KABILA Not Loaded",
            "",
            "Total bags: 3",
        ]
    )
