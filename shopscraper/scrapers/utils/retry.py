"""Retry policies built on tenacity."""

import logging

import httpx
import structlog
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    wait_random,
    retry_if_exception_type,
    before_sleep_log,
)


logger = structlog.get_logger(__name__)


def backoff_delay_ms(attempt: int, base_ms: int, cap_ms: int) -> int:
    """Deterministic part of the backoff after ``attempt`` failures.

    This is the schedule ``backoff_wait`` follows before jitter is added.
    """
    return min(base_ms * 2 ** attempt, cap_ms)


def backoff_wait(base_ms: int, cap_ms: int, jitter_max_ms: int):
    """Wait policy for page fetch retries.

    After the n-th failed attempt the delay is
    ``backoff_delay_ms(n, base_ms, cap_ms) + uniform(0, jitter_max_ms)``
    milliseconds. tenacity's exponential wait computes
    ``multiplier * 2**(n - 1)``, so the multiplier is doubled to land on
    ``base * 2**n``.
    """
    return wait_exponential(
        multiplier=2 * base_ms / 1000.0,
        max=cap_ms / 1000.0,
    ) + wait_random(0, jitter_max_ms / 1000.0)


# Reusable retry decorator for third-party API calls (httpx)
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
