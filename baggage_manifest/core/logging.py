from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog
from structlog.types import Processor

from baggage_manifest.core.config import get_settings

__all__: list[str] = [
    "configure_logging",
    "bind_parse_context",
]


def _ensure_parse_context(
    logger: Any,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Guarantee *parse_id* and *file_name* keys exist in *event_dict*."""

    event_dict.setdefault("parse_id", None)
    event_dict.setdefault("file_name", None)
    return event_dict


# One JSON object per line on stderr.  Records emitted inside
# ``bind_parse_context`` carry its ``parse_id``; ``_ensure_parse_context`` runs
# after ``merge_contextvars`` and only fills the keys left unbound, so records
# logged outside a parse still have a stable shape.
_JSON_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    _ensure_parse_context,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.format_exc_info,
    structlog.processors.JSONRenderer(),
]


def _configure_stdlib_logging(level: int) -> None:
    """Send stdlib *logging* records to stderr next to the structlog output.

    The parsers log through structlog, but pdfminer.six reports font and
    layout problems through stdlib loggers named ``pdfminer.*``.  Those emit
    several lines per page at DEBUG, so they are pinned to WARNING even when
    the parser itself runs at DEBUG.
    """

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))  # pdfminer text as-is

    # Remove default handlers to avoid duplicate logs in some runtimes.
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    logging.getLogger("pdfminer").setLevel(logging.WARNING)


_LOGGING_CONFIGURED: bool = False


def configure_logging(debug: Optional[bool] = None) -> None:
    """Set up JSON logging for the manifest parser.

    The command-line script and the upload collaborator call this once at
    start-up; ``parse_file`` itself never configures logging.  Later calls
    are no-ops.

    Parameters
    ----------
    debug:
        *True* selects ``DEBUG``, *False* selects ``INFO``.  When omitted the
        ``DEBUG`` setting (environment or ``.env``) decides.
    """

    global _LOGGING_CONFIGURED

    if _LOGGING_CONFIGURED:
        return

    if debug is None:
        debug = get_settings().debug

    level: int = logging.DEBUG if debug else logging.INFO

    _configure_stdlib_logging(level)

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        processors=_JSON_PROCESSORS,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )

    _LOGGING_CONFIGURED = True


@contextmanager
def bind_parse_context(file_name: str) -> Iterator[str]:
    """Bind a fresh ``parse_id`` and the file name for the duration of a parse.

    Every log line emitted by the parsers inside the block carries both keys,
    which lets the upload collaborator correlate them with its own request
    logs.  Only the keys bound here are removed on exit so an enclosing
    request context survives.
    """

    parse_id: str = uuid.uuid4().hex  # 32-char hex
    structlog.contextvars.bind_contextvars(parse_id=parse_id, file_name=file_name)
    try:
        yield parse_id
    finally:
        structlog.contextvars.unbind_contextvars("parse_id", "file_name")
