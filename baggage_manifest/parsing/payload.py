"""baggage_manifest/parsing/payload.py
###############################################################################
Upload payload decoding
###############################################################################
The upload collaborator sends binary documents (PDF, workbooks) as base64,
sometimes wrapped in a ``data:<mime>;base64,`` URL, and text documents as-is.
These helpers turn such a payload back into bytes or text.

Decoding is deliberately strict about the alphabet: a payload containing
spaces, tabs or punctuation outside base64 is *already text* (a report pasted
or exported under the wrong extension) and is reported as
:class:`MalformedPayloadError` so callers can read it directly instead of
decoding garbage.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import Final, Pattern

from baggage_manifest.core.exceptions import MalformedPayloadError

__all__: list[str] = [
    "strip_data_url",
    "decode_base64_payload",
    "decode_utf8",
    "PDF_SIGNATURE",
    "WORKBOOK_SIGNATURES",
]

PDF_SIGNATURE: Final[bytes] = b"%PDF"
# XLSX (zip container) and legacy XLS (OLE2 compound document).
WORKBOOK_SIGNATURES: Final[tuple[bytes, ...]] = (b"PK\x03\x04", b"\xd0\xcf\x11\xe0")

_DATA_URL_PREFIX: Final[Pattern[str]] = re.compile(r"^data:[^,]*;base64,", re.IGNORECASE)
_LINE_BREAKS: Final[Pattern[str]] = re.compile(r"[\r\n]+")
_BASE64_BODY: Final[Pattern[str]] = re.compile(r"^[A-Za-z0-9+/_-]+={0,2}$")
_URLSAFE_TO_STANDARD: Final[dict[int, str]] = str.maketrans("-_", "+/")


def strip_data_url(content: str) -> str:
    """Remove a leading ``data:…;base64,`` prefix if present."""
    return _DATA_URL_PREFIX.sub("", content, count=1)


def decode_base64_payload(content: str) -> bytes:
    """
    Decode a (possibly data-URL wrapped, possibly line-wrapped) base64 payload.

    Args:
        content: The payload exactly as received from the upload collaborator

    Returns:
        The decoded bytes

    Raises:
        MalformedPayloadError: If the payload is empty, contains characters
            outside the base64 alphabet, or is truncated mid-quantum
    """
    body = _LINE_BREAKS.sub("", strip_data_url(content).strip())
    if not body or not _BASE64_BODY.match(body):
        raise MalformedPayloadError("Payload is not base64 encoded")

    body = body.rstrip("=").translate(_URLSAFE_TO_STANDARD)
    if len(body) % 4 == 1:
        raise MalformedPayloadError("Base64 payload is truncated")

    padded = body + "=" * (-len(body) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayloadError(f"Base64 decoding failed: {e}") from e


def decode_utf8(data: bytes) -> str:
    """Decode bytes as UTF-8, replacing undecodable sequences."""
    return data.decode("utf-8", errors="replace")
