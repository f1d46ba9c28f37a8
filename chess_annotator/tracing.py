# chess_annotator/tracing.py

"""
tracing
~~~~~~~

This module provides components for session-wide traceability and
context-aware logging.
"""

import functools
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Callable

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CorrelationID:
    """A unique identifier for a single operation against a session."""
    session_id: str
    operation_id: str

    def as_dict(self) -> dict:
        """Returns the ID as a dictionary suitable for logging."""
        return asdict(self)


def new_session_id() -> str:
    return uuid.uuid4().hex[:12]


def trace_operation(func: Callable) -> Callable:
    """
    A decorator that binds the session and operation into structlog's contextvars.

    The decorated method's instance must expose a `session_id` attribute. All
    log lines emitted while the operation runs carry both identifiers.
    """
    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        correlation = CorrelationID(session_id=self.session_id, operation_id=uuid.uuid4().hex[:8])
        with structlog.contextvars.bound_contextvars(operation=func.__name__, **correlation.as_dict()):
            logger.debug("Entering session operation.")
            result = func(self, *args, **kwargs)
            logger.debug("Exiting session operation.")
            return result
    return wrapper
