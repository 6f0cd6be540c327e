"""Elapsed-time instrumentation for outbound calls."""

import time
from contextlib import contextmanager

from weather_lookup.logging_config import logger


@contextmanager
def timed(identifier: str):
    """Log how long the wrapped block took, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        logger.debug("HTTP_CALL_TIMING", identifier=identifier, elapsed_ms=elapsed_ms)
