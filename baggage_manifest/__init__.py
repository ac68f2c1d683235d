"""baggage_manifest
###############################################################################
Baggage reconciliation manifest parser
###############################################################################
Turns BIRS/BRS exports (PDF, plain text, CSV, spreadsheets) into a list of
per-bag records::

    from baggage_manifest import parse_file

    result = await parse_file("DT123_FIH.pdf", base64_payload)
    result.dict()  # {"items": [{"bagId": ..., "passengerName": ...}], "totalCount": n}

``parse_file`` never raises; unreadable input yields an empty result.
"""

from __future__ import annotations

from .pipeline import assemble_result, parse_file, parse_file_sync
from .types import BaggageRecord, ParseResult

__all__: list[str] = [
    "BaggageRecord",
    "ParseResult",
    "assemble_result",
    "parse_file",
    "parse_file_sync",
]
