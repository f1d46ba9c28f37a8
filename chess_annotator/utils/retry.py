# chess_annotator/utils/retry.py
"""
An asynchronous retry decorator for calls to the analysis backend.

Only transport-level failures (refused connections, timeouts) are retried;
an HTTP error status or a malformed body is a definite answer and propagates
on the first attempt.
"""
import asyncio
import functools
import random
from typing import Any, Callable, Coroutine, Final, Tuple, Type

import httpx
import structlog

from chess_annotator.utils import metrics

logger = structlog.get_logger(__name__)

TRANSIENT_EXCEPTIONS: Final[Tuple[Type[Exception], ...]] = (
    httpx.TransportError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
)

# Upper bound for a single wait, and the +/- share of it randomised.
MAX_BACKOFF_S: Final[float] = 5.0
JITTER_FACTOR: Final[float] = 0.2


def retry_with_backoff(
    attempts: int, initial_backoff_s: float, endpoint: str
) -> Callable[[Callable[..., Coroutine]], Callable[..., Coroutine]]:
    """
    Retries a coroutine function on transient errors, doubling the wait each time.

    Args:
        attempts: Total number of calls, the first one included.
        initial_backoff_s: Wait before the second call.
        endpoint: Label for the transient-error metric and the log context.
    """
    def decorator(func: Callable[..., Coroutine]) -> Callable[..., Coroutine]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_backoff_s
            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except TRANSIENT_EXCEPTIONS as e:
                    metrics.ANALYSIS_TRANSIENT_ERRORS_TOTAL.labels(endpoint=endpoint).inc()
                    if attempt == attempts:
                        logger.warning(
                            "Giving up on analysis request.", endpoint=endpoint, attempts=attempts, error=repr(e)
                        )
                        raise

                    wait_s = min(MAX_BACKOFF_S, delay + random.uniform(-delay, delay) * JITTER_FACTOR)
                    logger.info(
                        "Transient analysis error, retrying.",
                        endpoint=endpoint,
                        attempt=attempt,
                        wait_seconds=round(wait_s, 2),
                        error=repr(e),
                    )
                    await asyncio.sleep(wait_s)
                    delay *= 2
        return wrapper
    return decorator
