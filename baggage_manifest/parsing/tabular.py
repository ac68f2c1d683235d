"""baggage_manifest/parsing/tabular.py
###############################################################################
Row-oriented manifest parser (CSV, spreadsheet-as-JSON, binary workbooks)
###############################################################################
Tabular exports carry one bag per row, but every airline names its columns
differently.  Rows are first turned into *field maps* (column title → cell)
and each record field is then resolved through an ordered alias list.

Input shapes
============
• **CSV** – ``;`` is the delimiter whenever the content contains one (European
  exports), otherwise ``,``.  *pandas* does the tokenising; if it rejects the
  file we fall back to a plain split so malformed exports still yield rows.
• **Excel** – the upload client usually converts sheets to JSON (a top-level
  array or ``{"data": [...]}``).  A base64 workbook (xlsx/xls signature) is
  read with ``pandas.read_excel``.  Anything else is treated as CSV.

Edge cases & validation
-----------------------
• Rows whose joined values look like a header line (repeated column titles,
  page totals) or whose values are all empty are skipped.
• ``bagId`` and ``passengerName`` are mandatory; rows missing either vanish.
• ``loaded`` / ``received`` are tri-state: unrecognised values stay ``None``.
"""

from __future__ import annotations

# stdlib
import json
import math
import re
from io import BytesIO, StringIO
from typing import Any, Dict, Final, List, Mapping, Optional, Pattern, Sequence

# third-party
import pandas as pd
import structlog
from pandas.errors import EmptyDataError, ParserError

# local
from baggage_manifest.core.exceptions import MalformedPayloadError
from baggage_manifest.parsing.grammar import is_header_line
from baggage_manifest.parsing.payload import WORKBOOK_SIGNATURES, decode_base64_payload
from baggage_manifest.types import BaggageRecord

__all__: list[str] = [
    "FIELD_ALIASES",
    "detect_delimiter",
    "parse_boolean",
    "parse_csv",
    "parse_excel",
    "parse_weight",
]

logger = structlog.get_logger(__name__)

FieldMap = Mapping[str, Any]

# Ordered: the first alias present with a non-empty value wins.
FIELD_ALIASES: Final[Dict[str, Sequence[str]]] = {
    "bag_id": ("Bag ID", "Tag Number", "Baggage Tag", "TAG", "BAG_ID", "bag_id"),
    "passenger_name": (
        "Passenger Name",
        "Name",
        "PASSENGER",
        "passenger_name",
        "PAX_NAME",
    ),
    "pnr": ("PNR", "Booking Ref", "booking_ref", "RECORD_LOCATOR"),
    "seat_number": ("Seat", "Seat Number", "SEAT", "seat_number"),
    "flight_class": ("Class", "CLASS", "class", "Cabin"),
    "psn": ("PSN", "Seq", "Sequence", "psn"),
    "weight": ("Weight", "WEIGHT", "weight", "WT"),
    "route": ("Route", "ROUTE", "route"),
    "categories": ("Categories", "Special", "SPECIAL"),
    "loaded": ("Loaded", "LOADED", "loaded"),
    "received": ("Received", "RECEIVED", "received"),
}

_TRUE_VALUES: Final[frozenset[str]] = frozenset(
    {"YES", "Y", "TRUE", "1", "OUI", "LOADED", "RECEIVED"}
)
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"NO", "N", "FALSE", "0", "NON"})

_WEIGHT_NOISE: Final[Pattern[str]] = re.compile(r"[KG\s]")
_LEADING_FLOAT: Final[Pattern[str]] = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:E[+-]?\d+)?")
_LINE_BREAK: Final[Pattern[str]] = re.compile(r"\r?\n")


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _normalise_cell(value: Any) -> Any:
    """Map pandas cells onto plain Python values (NaN → None, 23.0 → "23")."""
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    if isinstance(value, str):
        return value.strip()
    return value


def _extract_value(row: FieldMap, aliases: Sequence[str]) -> Any:
    for key in aliases:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def parse_weight(value: Any) -> Optional[float]:
    """Parse ``"23 KG"``, ``"23kg"``, ``23`` … into kilograms; *None* if not numeric."""
    if value is None or isinstance(value, bool):
        return None
    cleaned = _WEIGHT_NOISE.sub("", _stringify(value).upper())
    match = _LEADING_FLOAT.match(cleaned)
    return float(match.group(0)) if match else None


def parse_boolean(value: Any) -> Optional[bool]:
    """Map YES/NO-style cells onto a tri-state flag."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value

    text = _stringify(value).strip().upper()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


def _optional_text(row: FieldMap, field_name: str) -> Optional[str]:
    value = _extract_value(row, FIELD_ALIASES[field_name])
    return None if value is None else _stringify(value)


def _is_header_row(row: FieldMap) -> bool:
    joined = " ".join(_stringify(v) for v in row.values()).upper()
    return is_header_line(joined)


def _is_empty_row(row: FieldMap) -> bool:
    return all(not v for v in row.values())


def _record_from_row(row: FieldMap) -> Optional[BaggageRecord]:
    bag_id = _extract_value(row, FIELD_ALIASES["bag_id"])
    passenger_name = _extract_value(row, FIELD_ALIASES["passenger_name"])
    if bag_id is None or passenger_name is None:
        return None

    bag_id_text = _stringify(bag_id).strip()
    name_text = _stringify(passenger_name).strip()
    if not bag_id_text or not name_text:
        return None

    return BaggageRecord(
        bag_id=bag_id_text,
        passenger_name=name_text,
        pnr=_optional_text(row, "pnr"),
        seat_number=_optional_text(row, "seat_number"),
        flight_class=_optional_text(row, "flight_class"),
        psn=_optional_text(row, "psn"),
        weight=parse_weight(_extract_value(row, FIELD_ALIASES["weight"])),
        route=_optional_text(row, "route"),
        categories=_optional_text(row, "categories"),
        loaded=parse_boolean(_extract_value(row, FIELD_ALIASES["loaded"])),
        received=parse_boolean(_extract_value(row, FIELD_ALIASES["received"])),
    )


def _records_from_rows(rows: Sequence[Any]) -> List[BaggageRecord]:
    items: List[BaggageRecord] = []
    skipped = 0
    for row in rows:
        if not isinstance(row, Mapping):
            skipped += 1
            continue
        if _is_header_row(row) or _is_empty_row(row):
            skipped += 1
            continue

        record = _record_from_row(row)
        if record is None:
            skipped += 1
            continue
        items.append(record)

    logger.info("tabular_parse_complete", rows=len(rows), parsed_bags=len(items), skipped=skipped)
    return items


# ---------------------------------------------------------------------------
# Row readers
# ---------------------------------------------------------------------------


def detect_delimiter(content: str) -> str:
    return ";" if ";" in content else ","


def _split_csv_rows(content: str, delimiter: str) -> List[Dict[str, Any]]:
    """Plain split-and-zip reader used when pandas rejects the file."""
    lines = _LINE_BREAK.split(content)
    headers = [h.strip() for h in lines[0].split(delimiter)] if lines else []

    rows: List[Dict[str, Any]] = []
    for line in lines[1:]:
        stripped = line.strip()
        if not stripped:
            continue
        values = [v.strip() for v in stripped.split(delimiter)]
        rows.append(
            {h: (values[i] if i < len(values) else None) for i, h in enumerate(headers)}
        )
    return rows


def _read_csv_rows(content: str) -> List[Dict[str, Any]]:
    delimiter = detect_delimiter(content)
    first_line = _LINE_BREAK.split(content, maxsplit=1)[0]
    width = len(first_line.split(delimiter))

    try:
        df = pd.read_csv(
            StringIO(content),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            index_col=False,
            skip_blank_lines=True,
            engine="python",
            # Keep over-long rows, dropping the cells that have no header.
            on_bad_lines=lambda bad_line: bad_line[:width],
        )
    except EmptyDataError:
        return []
    except ParserError as e:
        logger.warning("csv_pandas_parse_failed", error=str(e), fallback="split")
        return _split_csv_rows(content, delimiter)

    columns = [str(c).strip().lstrip("\ufeff") for c in df.columns]
    return [
        {col: _normalise_cell(v) for col, v in zip(columns, row.to_list())}
        for _, row in df.iterrows()
    ]


def _read_json_rows(content: str) -> Optional[List[Any]]:
    """Return JSON rows, or *None* when the content is not JSON at all."""
    try:
        data = json.loads(content)
    except ValueError:
        return None

    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return data["data"]
    return []


def _read_workbook_rows(content: str) -> Optional[List[Dict[str, Any]]]:
    """Return first-sheet rows of a base64 workbook, or *None* if it is not one."""
    try:
        payload = decode_base64_payload(content)
    except MalformedPayloadError:
        return None
    if not payload.startswith(WORKBOOK_SIGNATURES):
        return None

    try:
        df = pd.read_excel(BytesIO(payload), sheet_name=0, header=0)
    except Exception as e:  # noqa: BLE001 – engines raise many unrelated types
        logger.warning("workbook_read_failed", error=str(e), fallback="csv")
        return None

    columns = [str(c).strip() for c in df.columns]
    return [
        {col: _normalise_cell(v) for col, v in zip(columns, row.to_list())}
        for _, row in df.iterrows()
    ]


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def parse_csv(content: str) -> List[BaggageRecord]:
    """
    Parse a delimited-text manifest.

    Args:
        content: Raw CSV text; the first line holds the column titles

    Returns:
        One record per usable row, in file order
    """
    return _records_from_rows(_read_csv_rows(content))


def parse_excel(content: str) -> List[BaggageRecord]:
    """
    Parse a spreadsheet upload: JSON rows first, then a binary workbook, then CSV.

    Args:
        content: JSON text, a base64 workbook, or delimited text

    Returns:
        One record per usable row, in sheet order
    """
    rows = _read_json_rows(content)
    if rows is not None:
        logger.debug("excel_json_rows", rows=len(rows))
        return _records_from_rows(rows)

    workbook_rows = _read_workbook_rows(content)
    if workbook_rows is not None:
        logger.debug("excel_workbook_rows", rows=len(workbook_rows))
        return _records_from_rows(workbook_rows)

    logger.debug("excel_csv_fallback")
    return parse_csv(content)
