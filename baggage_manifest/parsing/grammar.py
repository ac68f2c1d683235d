"""baggage_manifest/parsing/grammar.py
###############################################################################
Shared line grammar for baggage manifests
###############################################################################
Compiled patterns and the SITA token walk used by both the line parser and
the salvage extractor.

Token walk
==========
A SITA BagManager line carries, after the tag, the class, the route, the
surname, the booking reference and a few status columns:

    0DT357756 Prio NBJ FIH MARQUES CAR0044DT 22 Loaded Y

Each token is offered to an ordered list of classifiers; the first one that
claims it wins and every field can only be set once.  The order matters on
real exports (a three-letter surname looks exactly like an airport code), so
``TOKEN_CLASSIFIERS`` must not be reordered.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Final, Iterable, List, Optional, Pattern, Tuple

__all__: list[str] = [
    "TagFields",
    "TOKEN_CLASSIFIERS",
    "RESERVED_KEYWORDS",
    "is_header_line",
    "is_metadata_line",
    "is_loaded_status",
    "is_named_column",
    "walk_tokens",
    "SITA_TAG_LINE",
    "SITA_TAG_ANYWHERE",
    "COLUMN_SPLIT",
    "NUMERIC_TAG_COLUMN",
    "CONCATENATED_LINE",
    "BARE_TAG_LINE",
    "LOOKAHEAD_NAME_LINE",
    "TRAILING_INTEGER",
    "LEADING_INTEGER",
    "WHITESPACE",
]

# ---------------------------------------------------------------------------
# Line-level patterns
# ---------------------------------------------------------------------------

SITA_TAG_LINE: Final[Pattern[str]] = re.compile(
    r"^\s*(0[A-Z]{2}\d{5,7})[\s\t]+", re.IGNORECASE
)
SITA_TAG_ANYWHERE: Final[Pattern[str]] = re.compile(r"0[A-Z]{2}\d{5,7}", re.IGNORECASE)
_SITA_TAG_TOKEN: Final[Pattern[str]] = re.compile(r"^0[A-Z]{2}\d{5,7}", re.IGNORECASE)

COLUMN_SPLIT: Final[Pattern[str]] = re.compile(r"\t+|\s{2,}")
NUMERIC_TAG_COLUMN: Final[Pattern[str]] = re.compile(r"^\d{6,13}$")
_STARTS_WITH_LETTER: Final[Pattern[str]] = re.compile(r"^[A-Z]", re.IGNORECASE)

CONCATENATED_LINE: Final[Pattern[str]] = re.compile(
    r"^(\d{9})([A-Z]+?)(\d+)\s+(LOADED|RECEIVED|UNLOADED|ACCEPTED|REJECTED)(.*)$",
    re.IGNORECASE,
)

BARE_TAG_LINE: Final[Pattern[str]] = re.compile(r"^(\d{9,13})\s*$")
# Case-sensitive: lookahead names are printed in capitals.
LOOKAHEAD_NAME_LINE: Final[Pattern[str]] = re.compile(r"^[A-Z/\s\-']{2,}$")
TRAILING_INTEGER: Final[Pattern[str]] = re.compile(r"(\d+)\s*$")
LEADING_INTEGER: Final[Pattern[str]] = re.compile(r"^(\d+)")
WHITESPACE: Final[Pattern[str]] = re.compile(r"\s+")

# ---------------------------------------------------------------------------
# Header / footer heuristic
# ---------------------------------------------------------------------------

_HEADER_KEYWORDS: Final[Tuple[str, ...]] = (
    "BAGGAGE LIST",
    "PASSENGER LIST",
    "MANIFEST",
    "---",
    "===",
    "___",
    "***",
    "PAGE",
    "TOTAL",
    "REPORT",
    "SUMMARY",
)
_HEADER_MIN_LENGTH: Final[int] = 15
_LEADING_CODE: Final[Pattern[str]] = re.compile(r"^[A-Z0-9]{10}")

# Banner lines seen in SITA BagManager and French ground-handling exports.
_METADATA_PREFIXES: Final[Tuple[str, ...]] = (
    "Page ",
    "Departure Flight",
    "Bag Information",
    "Class Route",
)
_METADATA_FRAGMENTS: Final[Tuple[str, ...]] = (
    "-- ",
    "Manifeste",
    "Escale",
    "SITA BagManager",
)


def is_header_line(line: str, min_length: int = _HEADER_MIN_LENGTH) -> bool:
    """Return *True* when **line** looks like a page header, footer or banner.

    Lines shorter than **min_length** (trimmed) count as headers too; the
    line parser lowers it when bare tag numbers must reach the lookahead
    grammar.

    The leading-code check is case-sensitive on purpose: data lines start with
    an upper-case tag, column titles usually do not.
    """
    upper = line.upper()

    if any(keyword in upper for keyword in _HEADER_KEYWORDS):
        return True

    if len(line.strip()) < min_length:
        return True

    if "BAG" in upper and "PASSENGER" in upper:
        return True

    if not _LEADING_CODE.match(line) and ("FLIGHT" in upper or "DATE" in upper):
        return True

    return False


def is_metadata_line(line: str) -> bool:
    """Return *True* for export banners that the keyword heuristic misses."""
    return line.startswith(_METADATA_PREFIXES) or any(
        fragment in line for fragment in _METADATA_FRAGMENTS
    )


def is_loaded_status(text: str) -> bool:
    """``LOADED`` present and not negated as ``NOT-LOADED`` / ``NOT LOADED``."""
    upper = text.upper()
    return "LOADED" in upper and "NOT-LOADED" not in upper and "NOT LOADED" not in upper


# ---------------------------------------------------------------------------
# Token walk
# ---------------------------------------------------------------------------

RESERVED_KEYWORDS: Final[Tuple[str, ...]] = (
    "EXPECTED",
    "LOADED",
    "RECEIVED",
    "OFFLOAD",
    "RELABEL",
    "REFLIGHT",
    "ROUTE",
    "CAR",
    "NOT",
    "ON",
    "TO",
    "DEST",
)

_CLASS_TOKEN: Final[Pattern[str]] = re.compile(
    r"^(Prio|Priority|Econ|Economy|First|Business|J|C|Y|F)$", re.IGNORECASE
)
_AIRPORT_TOKEN: Final[Pattern[str]] = re.compile(r"^[A-Z]{3}\*?$", re.IGNORECASE)
_NAME_TOKEN: Final[Pattern[str]] = re.compile(r"^[A-Z]{3,}$", re.IGNORECASE)
_PNR_TOKEN: Final[Pattern[str]] = re.compile(r"^[A-Z0-9]{5,7}$", re.IGNORECASE)
_ALPHA_ONLY: Final[Pattern[str]] = re.compile(r"^[A-Z]+$", re.IGNORECASE)


@dataclass
class TagFields:
    """Fields accumulated while walking the tokens that follow one tag."""

    flight_class: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    passenger_name: Optional[str] = None
    pnr: Optional[str] = None

    @property
    def route(self) -> Optional[str]:
        if self.origin and self.destination:
            return f"{self.origin}-{self.destination}"
        return None

    @property
    def has_name(self) -> bool:
        return bool(self.passenger_name) and len(self.passenger_name or "") >= 2


# A classifier inspects one token against the fields gathered so far and
# returns the ``(field, value)`` it claims, or *None* to pass.
TokenClassifier = Callable[[str, TagFields], Optional[Tuple[str, str]]]


def _classify_flight_class(token: str, fields: TagFields) -> Optional[Tuple[str, str]]:
    if fields.flight_class is None and _CLASS_TOKEN.match(token):
        return "flight_class", token
    return None


def _classify_airport(token: str, fields: TagFields) -> Optional[Tuple[str, str]]:
    if not _AIRPORT_TOKEN.match(token):
        return None
    code = token.rstrip("*")
    if fields.origin is None:
        return "origin", code
    if fields.destination is None:
        return "destination", code
    return None


def _is_reserved(token: str) -> bool:
    upper = token.upper()
    return any(upper == kw or upper.startswith(kw) for kw in RESERVED_KEYWORDS)


def _classify_passenger_name(
    token: str, fields: TagFields
) -> Optional[Tuple[str, str]]:
    if (
        fields.destination is not None
        and fields.passenger_name is None
        and _NAME_TOKEN.match(token)
        and not _is_reserved(token)
    ):
        return "passenger_name", token
    return None


def _classify_pnr(token: str, fields: TagFields) -> Optional[Tuple[str, str]]:
    if (
        fields.passenger_name is not None
        and fields.pnr is None
        and _PNR_TOKEN.match(token)
        and not token.upper().startswith("CAR")
        and not _ALPHA_ONLY.match(token)
    ):
        return "pnr", token
    return None


TOKEN_CLASSIFIERS: Final[List[TokenClassifier]] = [
    _classify_flight_class,
    _classify_airport,
    _classify_passenger_name,
    _classify_pnr,
]


def walk_tokens(tokens: Iterable[str]) -> TagFields:
    """Classify **tokens** left to right until the next tag token is reached."""
    fields = TagFields()
    for token in tokens:
        if _SITA_TAG_TOKEN.match(token):
            break  # next record starts here
        for classifier in TOKEN_CLASSIFIERS:
            claim = classifier(token, fields)
            if claim is not None:
                name, value = claim
                setattr(fields, name, value)
                break
    return fields


def is_named_column(column: str) -> bool:
    """Second column of the tab grammar: at least 2 chars, starting with a letter."""
    return len(column) >= 2 and bool(_STARTS_WITH_LETTER.match(column))
