"""
Manifest Parsing Pipeline

This module is the single public entry point of the engine. It routes an
uploaded manifest to the parser for its format, isolates the caller from any
parser failure, and assembles the final `ParseResult`.

Key Responsibilities:
- Derive the manifest format from the file extension.
- Run the format handler inside a per-call logging context.
- Convert every failure into an empty result (the engine never raises).
- Enforce result invariants: unique bag ids, names of at least 2 characters.

Dependencies:
- `baggage_manifest.parsing.registry`: Extension → handler dispatch table.
- `baggage_manifest.core.config`: Parser tuning settings.
- `structlog`: Structured logging with a bound ``parse_id``.
"""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, List, Optional, Set

import structlog

from baggage_manifest.core.config import Settings, get_settings
from baggage_manifest.core.exceptions import UnsupportedFormatError
from baggage_manifest.core.logging import bind_parse_context
from baggage_manifest.parsing.registry import ManifestFormat, resolve_handler
from baggage_manifest.types import BaggageRecord, ParseResult

__all__: list[str] = ["assemble_result", "parse_file", "parse_file_sync"]

logger = structlog.get_logger(__name__)

_MIN_NAME_LENGTH = 2


def _extension_of(file_name: str) -> str:
    """Text after the last dot, lower-cased; empty when there is no dot."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def assemble_result(items: Iterable[BaggageRecord]) -> ParseResult:
    """
    Build the final result from parser output.

    Parsers already honour these rules; they are re-applied here so that a
    misbehaving parser cannot leak a duplicate tag or a nameless record.

    Args:
        items: Records in first-encounter order

    Returns:
        A `ParseResult` whose ``total_count`` equals ``len(items)``
    """
    kept: List[BaggageRecord] = []
    seen: Set[str] = set()
    for item in items:
        if len((item.passenger_name or "").strip()) < _MIN_NAME_LENGTH:
            continue
        if item.bag_id in seen:
            continue
        seen.add(item.bag_id)
        kept.append(item)

    return ParseResult(items=kept, total_count=len(kept))


async def parse_file(
    file_name: str,
    file_content: str,
    *,
    settings: Optional[Settings] = None,
) -> ParseResult:
    """
    Parse one uploaded manifest.

    Args:
        file_name: Original file name; only its extension is used for routing
        file_content: Base64 payload (pdf, binary workbooks) or text content
        settings: Optional Settings instance (uses global if not provided)

    Returns:
        The parsed records; empty for unsupported formats or on any failure
    """
    start_time = time.perf_counter()
    extension = _extension_of(file_name or "")

    try:
        with bind_parse_context(file_name):
            settings = settings or get_settings()
            handler = resolve_handler(extension)
            items = await handler(file_content, settings)

            result = assemble_result(items)
            processing_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "manifest_parse_complete",
                format=ManifestFormat.from_extension(extension).value,
                total_count=result.total_count,
                processing_ms=round(processing_ms, 2),
            )
            return result
    except UnsupportedFormatError as e:
        logger.warning(
            "unsupported_manifest_format", file_name=file_name, extension=e.extension
        )
        return ParseResult.empty()
    except Exception as e:  # noqa: BLE001 – callers must always get a result
        logger.error(
            "manifest_parse_failed", file_name=file_name, error=str(e), exc_info=True
        )
        return ParseResult.empty()


def parse_file_sync(
    file_name: str,
    file_content: str,
    *,
    settings: Optional[Settings] = None,
) -> ParseResult:
    """Blocking wrapper around :func:`parse_file` for callers without a loop."""
    return asyncio.run(parse_file(file_name, file_content, settings=settings))
