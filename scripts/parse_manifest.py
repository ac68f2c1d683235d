#!/usr/bin/env python
###############################################################################
# scripts/parse_manifest.py
# -----------------------------------------------------------------------------
# Local manifest parser
#
# Runs a manifest file from disk through the same pipeline the upload endpoint
# uses and prints the resulting JSON.  Binary formats (PDF and workbooks) are
# base64 encoded first, exactly as the upload client sends them; text formats
# are passed through as UTF-8.
#
# Example
# -------
#     python scripts/parse_manifest.py samples/DT123_FIH.pdf --debug
###############################################################################

from __future__ import annotations

# stdlib
import argparse
import base64
import json
import sys
from pathlib import Path
from typing import List

# local
from baggage_manifest import parse_file_sync
from baggage_manifest.core.logging import configure_logging

__all__: List[str] = []  # script – no public API

_BINARY_EXTENSIONS = {".pdf", ".xlsx", ".xls"}


def _parse_args() -> argparse.Namespace:  # noqa: D401
    parser = argparse.ArgumentParser(
        description="Parse a baggage manifest file and print the result JSON",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("path", type=Path, help="Manifest file to parse.")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Emit DEBUG-level parser logs on stderr (default: the DEBUG setting).",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation of the printed result.",
    )
    return parser.parse_args()


def _read_payload(path: Path) -> str:
    """Return the file content the way the upload client would send it."""

    if path.suffix.lower() in _BINARY_EXTENSIONS:
        return base64.b64encode(path.read_bytes()).decode("ascii")
    return path.read_text(encoding="utf-8", errors="replace")


def main() -> None:
    args = _parse_args()
    # Without --debug the DEBUG setting decides.
    configure_logging(debug=args.debug or None)

    if not args.path.is_file():
        print(f"Error: {args.path} is not a file", file=sys.stderr)
        sys.exit(1)

    result = parse_file_sync(args.path.name, _read_payload(args.path))
    print(json.dumps(result.dict(), indent=args.indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
