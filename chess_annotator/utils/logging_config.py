# chess_annotator/utils/logging_config.py
"""
Routes structlog and standard-library logging through one stderr handler.

Session modules log with `structlog.get_logger(__name__)`; third-party
libraries (httpx) log through `logging`. Both end up in the same renderer so
the CLI prints one consistent stream, either human-readable or JSON lines.
"""

import logging
import sys
from typing import List

import structlog
from structlog.types import Processor


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """
    Configures structlog on top of the root stdlib logger.

    Args:
        log_level: Name of the minimum level, e.g. "DEBUG" or "warning".
        json_output: Render JSON lines instead of the colourised console format.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(foreign_pre_chain=shared, processor=renderer))

    # httpx logs every request at INFO; keep it quieter than our own output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.basicConfig(handlers=[handler], level=log_level.upper(), force=True)
