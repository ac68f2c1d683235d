"""
Core Custom Exceptions

This module defines the domain-specific exceptions raised inside the manifest
parser. None of them ever crosses the public ``parse_file`` boundary: each is
raised by the component that detects the problem and handled by the component
that owns the recovery (text fallback, salvage pass, or empty result).

Defined Exceptions:
- `ManifestParsingError`: Common base class for every parser failure.
- `UnsupportedFormatError`: The file extension has no registered handler.
- `MalformedPayloadError`: The payload is not decodable base64 or does not
  carry a PDF signature.
- `PdfExtractionError`: The PDF-to-text library failed on a payload that
  looked like a valid PDF.
"""

from __future__ import annotations

__all__: list[str] = [
    "ManifestParsingError",
    "UnsupportedFormatError",
    "MalformedPayloadError",
    "PdfExtractionError",
]


class ManifestParsingError(Exception):
    """Base class for recoverable errors raised while parsing a manifest."""


class UnsupportedFormatError(ManifestParsingError):
    """Raised by the format registry when no handler exists for an extension."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Unsupported manifest format: .{extension or '<none>'}")
        self.extension = extension


class MalformedPayloadError(ManifestParsingError):
    """
    Raised when an uploaded binary payload cannot be decoded.

    The PDF extractor treats this as a signal to read the payload as
    already-extracted text instead of a binary document.
    """


class PdfExtractionError(ManifestParsingError):
    """Raised when pdfminer fails to convert a signed PDF payload to text."""
