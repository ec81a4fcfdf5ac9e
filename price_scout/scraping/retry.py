"""
Sleep, jitter and retry primitives shared by the fetcher and search clients.

Retries only transient failures: timeouts, connection errors, HTTP 429 and
5xx responses. Everything else is raised to the caller on the first attempt.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
JITTER_RATIO = 0.2


class TransientRequestError(RuntimeError):
    """
    Raised by callers to mark a failure as worth retrying.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RetryExhaustedError(RuntimeError):
    """Raised when every attempt failed with a retryable error.

    Attributes:
        attempts: Total number of attempts made.
        last_error: The exception from the final attempt.
    """

    def __init__(self, attempts: int, last_error: Exception) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempt(s): {last_error}")


def status_code_of(exc: BaseException) -> int | None:
    if isinstance(exc, TransientRequestError):
        return exc.status_code
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code
    return None


def is_rate_limit_error(exc: BaseException) -> bool:
    return status_code_of(exc) == 429


def is_retryable_exception(exc: BaseException) -> bool:
    """
    Default retry predicate for outbound HTTP work.
    """

    if isinstance(exc, TransientRequestError):
        return exc.status_code is None or exc.status_code in RETRYABLE_STATUS_CODES
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True
    if isinstance(exc, requests.HTTPError):
        return status_code_of(exc) in RETRYABLE_STATUS_CODES
    return False


def sleep_with_jitter(base_seconds: float, jitter_ratio: float = JITTER_RATIO) -> float:
    """
    Sleep for `base_seconds` plus up to `jitter_ratio` of it, return the delay.
    """

    delay = max(0.0, base_seconds) * (1.0 + random.uniform(0.0, jitter_ratio))
    if delay > 0:
        time.sleep(delay)
    return delay


def random_delay(min_seconds: float, max_seconds: float) -> float:
    """
    Sleep for a uniformly random duration inside [min_seconds, max_seconds].
    """

    low, high = sorted((max(0.0, min_seconds), max(0.0, max_seconds)))
    delay = random.uniform(low, high)
    if delay > 0:
        time.sleep(delay)
    return delay


def calculate_backoff(
    attempt: int,
    *,
    base_seconds: float = 1.0,
    max_seconds: float = 30.0,
    jitter_ratio: float = JITTER_RATIO,
) -> float:
    """
    Exponential backoff for a zero-based attempt index, capped, plus jitter.
    """

    delay = min(max_seconds, base_seconds * (2**attempt))
    return delay + delay * random.uniform(0.0, jitter_ratio)


def retry_call(
    operation: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay_seconds: float = 1.0,
    max_delay_seconds: float = 10.0,
    should_retry: Callable[[BaseException], bool] = is_retryable_exception,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
    description: str = "operation",
) -> T:
    """Run `operation` with exponential backoff on retryable failures.

    Args:
        operation: Zero-argument callable performing one attempt.
        max_attempts: Total attempts including the first one.
        base_delay_seconds: Delay before the second attempt; doubles after.
        max_delay_seconds: Upper bound for any single delay (before jitter).
        should_retry: Predicate deciding whether an exception is transient.
        on_retry: Hook called with (attempt, error, delay) before sleeping.
        description: Label used in retry log lines.

    Returns:
        Whatever `operation` returns on the first successful attempt.

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error.
        Exception: Any non-retryable error, unchanged, on first occurrence.
    """

    total_attempts = max(1, max_attempts)
    last_error: Exception | None = None

    for attempt in range(total_attempts):
        try:
            return operation()
        except Exception as exc:
            if not should_retry(exc):
                raise
            last_error = exc

        if attempt >= total_attempts - 1:
            break

        delay = calculate_backoff(
            attempt,
            base_seconds=base_delay_seconds,
            max_seconds=max_delay_seconds,
        )
        if on_retry is not None:
            on_retry(attempt + 1, last_error, delay)
        logger.warning(
            "Retrying %s attempt=%s/%s wait_seconds=%.2f error=%s",
            description,
            attempt + 1,
            total_attempts,
            delay,
            last_error,
        )
        time.sleep(delay)

    if last_error is None:
        raise RuntimeError(f"{description} made no attempts.")
    raise RetryExhaustedError(attempts=total_attempts, last_error=last_error)
