"""baggage_manifest/parsing/pdf.py
###############################################################################
PDF manifest extraction
###############################################################################
PDF uploads arrive base64 encoded.  Converting them to records is a ladder of
increasingly tolerant steps:

1. Decode the payload.  Not base64 at all → the string *is* the report text,
   hand it to the line parser.
2. Check the ``%PDF`` signature.  Missing → decode the bytes as UTF-8 and hand
   them to the line parser.
3. Extract text with *pdfminer.six* in a worker thread (the only blocking call
   in the package).
4. Run the line parser; if it finds nothing, run the salvage extractor over
   the same text.  If pdfminer itself failed, salvage the raw bytes as text.

None of these steps raises to the caller; the worst case is an empty list.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from io import BytesIO
from typing import Callable, List, Optional

import structlog
from pdfminer.high_level import extract_text

from baggage_manifest.core.config import Settings, get_settings
from baggage_manifest.core.exceptions import MalformedPayloadError, PdfExtractionError
from baggage_manifest.parsing.payload import (
    PDF_SIGNATURE,
    decode_base64_payload,
    decode_utf8,
    strip_data_url,
)
from baggage_manifest.parsing.salvage import ContextWindowExtractor
from baggage_manifest.parsing.text import TextLineParser
from baggage_manifest.types import BaggageRecord

__all__: list[str] = ["FallbackLadder", "extract_pdf_text", "parse_pdf"]

logger = structlog.get_logger(__name__)

RecordParser = Callable[[str], List[BaggageRecord]]


@dataclass(frozen=True)
class FallbackLadder:
    """Run *primary*; if it yields no records, run *fallback* on the same text."""

    primary: RecordParser
    fallback: RecordParser

    def run(self, text: str) -> List[BaggageRecord]:
        items = self.primary(text)
        if items:
            return items

        logger.info("pdf_primary_parser_empty", fallback="salvage")
        return self.fallback(text)


async def extract_pdf_text(content: bytes) -> str:
    """
    Extract text content from PDF bytes using pdfminer.six.

    Args:
        content: Raw PDF bytes (signature already checked)

    Returns:
        Extracted text content as a string

    Raises:
        PdfExtractionError: If pdfminer cannot read the document
    """

    def _worker(pdf_content: bytes) -> str:
        pdf_buffer = BytesIO(pdf_content)

        try:
            extracted_text = extract_text(pdf_buffer)
            return extracted_text or ""
        except Exception as e:  # noqa: BLE001 – pdfminer raises assorted types
            raise PdfExtractionError(f"pdfminer failed: {e}") from e

    return await asyncio.to_thread(_worker, content)


async def parse_pdf(
    content: str, *, settings: Optional[Settings] = None
) -> List[BaggageRecord]:
    """
    Turn a base64 PDF upload into baggage records.

    Args:
        content: ``data:application/pdf;base64,…`` URL or bare base64 string
        settings: Optional Settings instance (uses global if not provided)

    Returns:
        Records in document order; empty when every step finds nothing
    """
    settings = settings or get_settings()
    line_parser = TextLineParser.from_settings(settings)
    salvage = ContextWindowExtractor.from_settings(settings)

    try:
        payload = decode_base64_payload(content)
    except MalformedPayloadError as e:
        logger.warning("pdf_payload_not_base64", error=str(e), fallback="text")
        return line_parser.parse(strip_data_url(content))

    if not payload[:5].startswith(PDF_SIGNATURE):
        logger.warning(
            "pdf_signature_invalid", header=payload[:5].hex(), fallback="text"
        )
        return line_parser.parse(decode_utf8(payload))

    try:
        text = await extract_pdf_text(payload)
    except PdfExtractionError as e:
        logger.warning("pdf_extraction_failed", error=str(e), fallback="salvage")
        return salvage.extract(decode_utf8(payload))

    logger.info("pdf_text_extracted", characters=len(text), pages=text.count("\f"))
    return FallbackLadder(primary=line_parser.parse, fallback=salvage.extract).run(text)
