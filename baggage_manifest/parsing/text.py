"""baggage_manifest/parsing/text.py
###############################################################################
Line-oriented manifest parser
###############################################################################
Primary engine for plain-text reports and for text extracted from PDFs.  One
document may mix layouts, so every line is offered to several grammars in a
fixed priority order:

1. skip rule (blank, too short, page header/footer, export banner)
2. SITA BagManager line  ``0DT357756 Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y``
3. tab / wide-space columns  ``235345230<TAB>EZANDOMPANGI<TAB>0 LOADED Received``
4. glued columns  ``235345230EZANDOMPANGI0 LOADED Received``
5. bare tag followed by up to N detail lines (multi-line records)

The header heuristic treats every line shorter than ``header_min_length``
(15 by default) as a header, and a bare 9-13 digit tag is always shorter.
Exports with multi-line records therefore need ``HEADER_MIN_LENGTH`` lowered
to 9 before rule 5 can fire for every tag length.

Design considerations
=====================
1. **Explicit state machine** – the scanner moves between ``SCANNING``,
   ``IN_TAG_WALK`` and ``IN_LOOKAHEAD``.  Each transition reads the immutable
   line tuple and the seen-tag set and returns the next state, the next cursor
   position and at most one record; only the driver loop mutates state.
2. **First tag wins** – a tag already emitted in this call is never emitted
   again, whatever grammar produced it.
3. **Unresolved SITA tags stay unseen** – when no passenger name can be found
   the tag is not recorded as seen, leaving it to a whole-document salvage
   pass (see :mod:`baggage_manifest.parsing.salvage`).
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import AbstractSet, Final, List, Optional, Pattern, Sequence

import structlog

from baggage_manifest.core.config import Settings, get_settings
from baggage_manifest.parsing.grammar import (
    BARE_TAG_LINE,
    COLUMN_SPLIT,
    CONCATENATED_LINE,
    LEADING_INTEGER,
    LOOKAHEAD_NAME_LINE,
    NUMERIC_TAG_COLUMN,
    SITA_TAG_LINE,
    TRAILING_INTEGER,
    WHITESPACE,
    is_header_line,
    is_loaded_status,
    is_metadata_line,
    is_named_column,
    walk_tokens,
)
from baggage_manifest.types import BaggageRecord

__all__: list[str] = ["ScanState", "TextLineParser", "parse_text"]

logger = structlog.get_logger(__name__)

_LINE_BREAK: Final[Pattern[str]] = re.compile(r"\r?\n")
_PLACEHOLDER_NAMES: Final[frozenset[str]] = frozenset({"ZZZZZZ", "UNKNOWN"})


class ScanState(enum.Enum):
    SCANNING = "scanning"
    IN_TAG_WALK = "in_tag_walk"
    IN_LOOKAHEAD = "in_lookahead"


@dataclass(frozen=True)
class _Step:
    """Result of one transition: where to go next and what (if anything) to emit."""

    state: ScanState
    index: int
    record: Optional[BaggageRecord] = None


class TextLineParser:
    """Turn manifest text into records, one call at a time.

    Instances hold configuration only; every :meth:`parse` call starts from a
    clean cursor and seen-tag set, so one parser may serve concurrent callers.
    """

    def __init__(
        self,
        *,
        lookahead_lines: int = 10,
        min_line_length: int = 5,
        header_min_length: int = 15,
    ) -> None:
        self.lookahead_lines = lookahead_lines
        self.min_line_length = min_line_length
        self.header_min_length = header_min_length

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TextLineParser":
        settings = settings or get_settings()
        return cls(
            lookahead_lines=settings.lookahead_lines,
            min_line_length=settings.min_line_length,
            header_min_length=settings.header_min_length,
        )

    def parse(self, text: str) -> List[BaggageRecord]:
        lines: tuple[str, ...] = tuple(_LINE_BREAK.split(text))
        seen: set[str] = set()
        items: List[BaggageRecord] = []

        state = ScanState.SCANNING
        index = 0
        while index < len(lines):
            step = self._transition(state, lines, index, seen)
            if step.record is not None:
                seen.add(step.record.bag_id)
                items.append(step.record)
            state, index = step.state, step.index

        logger.info(
            "text_parse_complete",
            total_lines=len(lines),
            parsed_bags=len(items),
        )
        if not items:
            logger.debug(
                "text_parse_no_items",
                preview=" | ".join(line.strip()[:80] for line in lines[:5]),
            )
        return items

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _transition(
        self,
        state: ScanState,
        lines: Sequence[str],
        index: int,
        seen: AbstractSet[str],
    ) -> _Step:
        if state is ScanState.IN_TAG_WALK:
            return self._walk_tag_line(lines[index].strip(), index, seen)
        if state is ScanState.IN_LOOKAHEAD:
            return self._read_lookahead(lines, index, seen)
        return self._scan(lines[index].strip(), index, seen)

    def _scan(self, line: str, index: int, seen: AbstractSet[str]) -> _Step:
        advance = _Step(ScanState.SCANNING, index + 1)

        if not line or len(line) < self.min_line_length:
            return advance

        if is_header_line(line, min_length=self.header_min_length) or is_metadata_line(line):
            return advance

        if SITA_TAG_LINE.match(line):
            return _Step(ScanState.IN_TAG_WALK, index)

        record = _parse_columns(line)
        if record is None:
            record = _parse_concatenated(line)

        if record is None and BARE_TAG_LINE.match(line):
            return _Step(ScanState.IN_LOOKAHEAD, index)

        if record is None or record.bag_id in seen:
            return advance
        return _Step(ScanState.SCANNING, index + 1, record)

    def _walk_tag_line(self, line: str, index: int, seen: AbstractSet[str]) -> _Step:
        advance = _Step(ScanState.SCANNING, index + 1)
        match = SITA_TAG_LINE.match(line)
        if match is None:  # pragma: no cover – state only entered on a match
            return advance

        bag_id = match.group(1).upper()
        if bag_id in seen:
            return advance

        rest = line[match.end():]
        fields = walk_tokens(rest.split())
        if not fields.has_name:
            logger.debug("sita_tag_unresolved", bag_id=bag_id, rest=rest[:50])
            return advance

        loaded = is_loaded_status(line)
        record = BaggageRecord(
            bag_id=bag_id,
            passenger_name=fields.passenger_name or "",
            pnr=fields.pnr,
            flight_class=fields.flight_class,
            route=fields.route,
            loaded=loaded,
            received=loaded,
        )
        return _Step(ScanState.SCANNING, index + 1, record)

    def _read_lookahead(
        self, lines: Sequence[str], index: int, seen: AbstractSet[str]
    ) -> _Step:
        match = BARE_TAG_LINE.match(lines[index].strip())
        if match is None:  # pragma: no cover – state only entered on a match
            return _Step(ScanState.SCANNING, index + 1)

        bag_id = match.group(1)
        passenger_name: Optional[str] = None
        weight: Optional[float] = None
        loaded = False
        received = False

        end = index + 1
        while end < len(lines) and end - index - 1 < self.lookahead_lines:
            detail = lines[end].strip()
            if BARE_TAG_LINE.match(detail):
                break

            if passenger_name is None and LOOKAHEAD_NAME_LINE.match(detail):
                passenger_name = detail

            if weight is None:
                weight_match = TRAILING_INTEGER.search(detail)
                if weight_match:
                    weight = float(weight_match.group(1))

            if "LOADED" in detail:
                loaded = True
            if "Received" in detail:
                received = True
            end += 1

        record: Optional[BaggageRecord] = None
        if passenger_name and bag_id not in seen:
            record = BaggageRecord(
                bag_id=bag_id,
                passenger_name=passenger_name,
                weight=weight,
                loaded=loaded,
                received=received,
            )
        return _Step(ScanState.SCANNING, end, record)


def _parse_columns(line: str) -> Optional[BaggageRecord]:
    """Tab or wide-space separated ``TAG  NAME  WEIGHT STATUS…`` lines."""
    columns = COLUMN_SPLIT.split(line)
    if len(columns) < 2:
        return None

    first = columns[0].strip()
    second = columns[1].strip()
    if not NUMERIC_TAG_COLUMN.match(first) or not is_named_column(second):
        return None
    if second.upper() in _PLACEHOLDER_NAMES:
        return None

    rest = " ".join(columns[2:]).strip()
    weight_match = LEADING_INTEGER.match(rest)
    upper_rest = rest.upper()
    return BaggageRecord(
        bag_id=first,
        passenger_name=WHITESPACE.sub(" ", second),
        weight=float(weight_match.group(1)) if weight_match else None,
        loaded="LOADED" in upper_rest,
        received="RECEIVED" in upper_rest,
    )


def _parse_concatenated(line: str) -> Optional[BaggageRecord]:
    """Exports that glue tag, surname and weight together before the status."""
    match = CONCATENATED_LINE.match(line)
    if match is None or len(match.group(2)) < 2:
        return None

    status = (match.group(4) + match.group(5)).upper()
    return BaggageRecord(
        bag_id=match.group(1),
        passenger_name=WHITESPACE.sub(" ", match.group(2).strip()),
        weight=float(match.group(3)),
        loaded="LOADED" in status,
        received="RECEIVED" in status,
    )


def parse_text(text: str, *, settings: Optional[Settings] = None) -> List[BaggageRecord]:
    """
    Parse a plain-text manifest with the configured line parser.

    Args:
        text: Whole document text, any mix of supported line layouts
        settings: Optional Settings instance (uses global if not provided)

    Returns:
        Records in document order, unique by tag
    """
    return TextLineParser.from_settings(settings).parse(text)
