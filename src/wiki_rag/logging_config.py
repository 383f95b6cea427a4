"""Logging setup and a latency-logging decorator."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = logging.INFO) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)


def log_latency(operation_name: str):
    """Log `operation | latency_ms=... | status=...` around a sync call."""

    def decorator(func: Callable):
        logger = logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                latency_ms = (time.perf_counter() - start) * 1000
                logger.error(f"{operation_name} | latency_ms={latency_ms:.2f} | status=error | error={e}")
                raise
            latency_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{operation_name} | latency_ms={latency_ms:.2f} | status=success")
            return result

        return wrapper

    return decorator
