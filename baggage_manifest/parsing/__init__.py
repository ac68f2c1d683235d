"""baggage_manifest/parsing/__init__.py
###############################################################################
Parsing Package Root
###############################################################################
Format-specific parsers that turn one uploaded manifest into a list of
:class:`~baggage_manifest.types.BaggageRecord`.

Each parser MUST:

1. Never block the event loop – the PDF extractor off-loads pdfminer via
   `asyncio.to_thread()`; every other parser is pure and synchronous.
2. Keep no state between calls – cursors and seen-tag sets live on the stack.
3. Return records *unfiltered by business rules*; uniqueness and the name
   length guard are re-applied by the pipeline's result assembly.

Parser Registry
===============
Dispatch from file extension to parser lives in
:py:mod:`baggage_manifest.parsing.registry`.
"""

from __future__ import annotations

# local – explicit, absolute imports keep mypy happy
from .pdf import parse_pdf
from .salvage import salvage_sita_tags
from .tabular import parse_csv, parse_excel
from .text import parse_text

__all__: list[str] = [
    "parse_pdf",
    "parse_csv",
    "parse_excel",
    "parse_text",
    "salvage_sita_tags",
]
