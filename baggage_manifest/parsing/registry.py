"""
Manifest Format Registry

This module centralizes the mapping between file extensions, manifest formats
and the coroutine that parses each format. The pipeline resolves a handler
here and never branches on extensions itself.

Key Responsibilities:
- Define the closed set of manifest formats (`ManifestFormat`).
- Map lowercase file extensions onto formats.
- Map every parseable format onto an async handler.

Dependencies:
- Individual parser modules (`.pdf`, `.tabular`, `.text`).
"""

from __future__ import annotations

import enum
from typing import Awaitable, Callable, Dict, Final, FrozenSet, List

from baggage_manifest.core.config import Settings
from baggage_manifest.core.exceptions import UnsupportedFormatError
from baggage_manifest.types import BaggageRecord

from .pdf import parse_pdf
from .tabular import parse_csv, parse_excel
from .text import parse_text

__all__: list[str] = [
    "ManifestFormat",
    "MANIFEST_HANDLERS",
    "SUPPORTED_EXTENSIONS",
    "resolve_handler",
]

ManifestHandler = Callable[[str, Settings], Awaitable[List[BaggageRecord]]]


class ManifestFormat(str, enum.Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"
    TEXT = "text"
    UNKNOWN = "unknown"

    @classmethod
    def from_extension(cls, extension: str) -> "ManifestFormat":
        """Map an extension (with or without leading dot, any case) to a format."""
        return _EXTENSION_FORMATS.get(extension.lower().lstrip("."), cls.UNKNOWN)


_EXTENSION_FORMATS: Final[Dict[str, ManifestFormat]] = {
    "pdf": ManifestFormat.PDF,
    "xlsx": ManifestFormat.EXCEL,
    "xls": ManifestFormat.EXCEL,
    "csv": ManifestFormat.CSV,
    "txt": ManifestFormat.TEXT,
    "tsv": ManifestFormat.TEXT,
}

SUPPORTED_EXTENSIONS: Final[FrozenSet[str]] = frozenset(_EXTENSION_FORMATS)


async def _handle_pdf(content: str, settings: Settings) -> List[BaggageRecord]:
    return await parse_pdf(content, settings=settings)


async def _handle_excel(content: str, settings: Settings) -> List[BaggageRecord]:
    return parse_excel(content)


async def _handle_csv(content: str, settings: Settings) -> List[BaggageRecord]:
    return parse_csv(content)


async def _handle_text(content: str, settings: Settings) -> List[BaggageRecord]:
    return parse_text(content, settings=settings)


# Dispatch table – one handler per parseable format; UNKNOWN is absent on purpose.
MANIFEST_HANDLERS: Final[Dict[ManifestFormat, ManifestHandler]] = {
    ManifestFormat.PDF: _handle_pdf,
    ManifestFormat.EXCEL: _handle_excel,
    ManifestFormat.CSV: _handle_csv,
    ManifestFormat.TEXT: _handle_text,
}


def resolve_handler(extension: str) -> ManifestHandler:
    """
    Return the handler for **extension**.

    Raises:
        UnsupportedFormatError: If the extension maps to ``UNKNOWN``
    """
    manifest_format = ManifestFormat.from_extension(extension)
    handler = MANIFEST_HANDLERS.get(manifest_format)
    if handler is None:
        raise UnsupportedFormatError(extension)
    return handler
