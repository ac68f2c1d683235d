"""baggage_manifest/parsing/salvage.py
###############################################################################
Context-window salvage pass for SITA tags
###############################################################################
PDF text extraction frequently destroys line structure: columns get glued
together, rows wrap, and several bags end up on one physical line.  When the
line parser finds nothing at all, this module ignores lines entirely and
scans the whole text for SITA tags (``0`` + airline code + 5-7 digits), then
reads a bounded window of characters after each one.

Within the window the same token walk as the line parser applies.  If that
fails, a relaxed pattern tolerates glued columns such as::

    0DT352712PrioJNB* BZVMAHOUASSA88VXQ4Expected

and yields a minimal record (name and status only).

The ``received`` flag differs from the line parser: here it is *received OR
loaded*, there it mirrors *loaded*.  The two only agree because no known
export reports a bag as received but not loaded; keep them separate.
"""

from __future__ import annotations

import re
from typing import Final, List, Optional, Pattern, Set

import structlog

from baggage_manifest.core.config import Settings, get_settings
from baggage_manifest.parsing.grammar import (
    SITA_TAG_ANYWHERE,
    is_loaded_status,
    walk_tokens,
)
from baggage_manifest.types import BaggageRecord

__all__: list[str] = ["ContextWindowExtractor", "salvage_sita_tags"]

logger = structlog.get_logger(__name__)

# Class, origin (optional ``*``), destination, then the surname glued to the
# booking reference and status columns.
_RELAXED_LAYOUT: Final[Pattern[str]] = re.compile(
    r"^\s*(?:(?i:Prio|Priority|Econ|Economy|First|Business))?\s*"
    r"([A-Z]{3})\*?\s*([A-Z]{3})\s*([A-Z]{3,})"
)
_STATUS_SUFFIXES: Final[tuple[str, ...]] = ("EXPECTED", "NOTLOADED", "LOADED", "RECEIVED")


def _strip_status_suffix(word: str) -> str:
    for suffix in _STATUS_SUFFIXES:
        if word.upper().endswith(suffix):
            word = word[: -len(suffix)]
    return word


class ContextWindowExtractor:
    """Position-independent SITA tag recovery over a whole document."""

    def __init__(self, *, window_chars: int = 300) -> None:
        self.window_chars = window_chars

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None
    ) -> "ContextWindowExtractor":
        settings = settings or get_settings()
        return cls(window_chars=settings.context_window_chars)

    def extract(self, text: str) -> List[BaggageRecord]:
        matches = list(SITA_TAG_ANYWHERE.finditer(text))
        logger.debug("salvage_scan_started", potential_tags=len(matches))

        items: List[BaggageRecord] = []
        visited: Set[str] = set()
        for position, match in enumerate(matches):
            tag = match.group(0).upper()
            if tag in visited:
                continue
            visited.add(tag)

            end = match.end() + self.window_chars
            if position + 1 < len(matches):
                end = min(end, matches[position + 1].start())
            window = text[match.end():end]

            record = self._record_from_window(tag, window)
            if record is None:
                logger.debug("salvage_tag_skipped", bag_id=tag, window=window[:40])
                continue
            items.append(record)

        logger.info("salvage_scan_complete", parsed_bags=len(items))
        return items

    def _record_from_window(self, tag: str, window: str) -> Optional[BaggageRecord]:
        loaded = is_loaded_status(window)
        received = "RECEIVED" in window.upper() or loaded

        fields = walk_tokens(window.split())
        if fields.has_name:
            return BaggageRecord(
                bag_id=tag,
                passenger_name=fields.passenger_name or "",
                pnr=fields.pnr,
                flight_class=fields.flight_class,
                route=fields.route,
                loaded=loaded,
                received=received,
            )

        relaxed = _RELAXED_LAYOUT.match(window)
        if relaxed is None:
            return None
        name = _strip_status_suffix(relaxed.group(3))
        if len(name) < 2:
            return None
        return BaggageRecord(
            bag_id=tag,
            passenger_name=name,
            loaded=loaded,
            received=received,
        )


def salvage_sita_tags(
    text: str, *, settings: Optional[Settings] = None
) -> List[BaggageRecord]:
    """Run the salvage pass with the configured window size."""
    return ContextWindowExtractor.from_settings(settings).extract(text)
