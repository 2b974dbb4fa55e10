"""
Timing Utilities for Latency Instrumentation

Context managers for logging how long LLM calls and route handlers take.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger("ideajudge.timing")


def log_timing(name: str, action: str, duration_ms: Optional[float] = None):
    """Log a timing event in standard format."""
    if duration_ms is not None:
        logger.info("[TIMING] %s: %s — duration=%.0fms", name, action, duration_ms)
    else:
        logger.info("[TIMING] %s: %s", name, action)


@asynccontextmanager
async def async_timer(name: str, action: str = "OPERATION"):
    """Async context manager for timing awaited operations."""
    log_timing(name, f"{action} START")
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        log_timing(name, f"{action} END", duration_ms)
