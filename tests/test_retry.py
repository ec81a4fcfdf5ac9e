"""
tests/test_retry.py

Unit tests for the shared retry and backoff primitives.

Coverage
--------
- Retry predicate for HTTP status codes and transport errors
- Backoff growth, cap and jitter bounds
- retry_call success after transient failures
- Non-retryable errors propagate on the first attempt
- Exhaustion raises RetryExhaustedError carrying the last error
"""

from __future__ import annotations

import pytest
import requests
from fakes import FakeResponse

from price_scout.scraping.retry import (
    RetryExhaustedError,
    TransientRequestError,
    calculate_backoff,
    is_rate_limit_error,
    is_retryable_exception,
    random_delay,
    retry_call,
    sleep_with_jitter,
)


def _http_error(status_code: int) -> requests.HTTPError:
    return requests.HTTPError(f"HTTP {status_code}", response=FakeResponse(status_code=status_code))


# ---------------------------------------------------------------------------
# Retry predicate
# ---------------------------------------------------------------------------


class TestIsRetryableException:
    @pytest.mark.parametrize("status_code", [429, 500, 502, 503, 504])
    def test_transient_statuses_are_retryable(self, status_code: int) -> None:
        assert is_retryable_exception(_http_error(status_code)) is True

    @pytest.mark.parametrize("status_code", [400, 401, 403, 404])
    def test_client_errors_are_not_retryable(self, status_code: int) -> None:
        assert is_retryable_exception(_http_error(status_code)) is False

    def test_timeouts_and_connection_errors_are_retryable(self) -> None:
        assert is_retryable_exception(requests.Timeout("slow")) is True
        assert is_retryable_exception(requests.ConnectionError("reset")) is True

    def test_programming_errors_are_not_retryable(self) -> None:
        assert is_retryable_exception(KeyError("x")) is False

    def test_rate_limit_detection(self) -> None:
        assert is_rate_limit_error(TransientRequestError("limited", status_code=429)) is True
        assert is_rate_limit_error(_http_error(503)) is False


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------


class TestCalculateBackoff:
    def test_grows_exponentially_within_jitter(self) -> None:
        for attempt, expected in enumerate([1.0, 2.0, 4.0]):
            delay = calculate_backoff(attempt, base_seconds=1.0, max_seconds=30.0)
            assert expected <= delay <= expected * 1.2

    def test_is_capped_before_jitter(self) -> None:
        delay = calculate_backoff(10, base_seconds=2.0, max_seconds=10.0)
        assert 10.0 <= delay <= 12.0

    def test_sleep_helpers_return_bounded_delays(self) -> None:
        assert 1.0 <= sleep_with_jitter(1.0) <= 1.2
        assert 0.3 <= random_delay(0.3, 1.1) <= 1.1
        assert random_delay(0.0, 0.0) == 0.0


# ---------------------------------------------------------------------------
# retry_call
# ---------------------------------------------------------------------------


class TestRetryCall:
    def test_returns_after_transient_failures(self) -> None:
        outcomes: list[object] = [requests.Timeout("t1"), _http_error(503), "ok"]
        retries: list[int] = []

        def operation() -> str:
            item = outcomes.pop(0)
            if isinstance(item, Exception):
                raise item
            return str(item)

        result = retry_call(
            operation,
            max_attempts=3,
            base_delay_seconds=0.0,
            on_retry=lambda attempt, _error, _delay: retries.append(attempt),
        )
        assert result == "ok"
        assert retries == [1, 2]

    def test_non_retryable_error_is_raised_immediately(self) -> None:
        calls = {"count": 0}

        def operation() -> None:
            calls["count"] += 1
            raise _http_error(404)

        with pytest.raises(requests.HTTPError):
            retry_call(operation, max_attempts=3)
        assert calls["count"] == 1

    def test_exhaustion_carries_attempts_and_last_error(self) -> None:
        def operation() -> None:
            raise TransientRequestError("limited", status_code=429)

        with pytest.raises(RetryExhaustedError) as exc_info:
            retry_call(operation, max_attempts=3, base_delay_seconds=0.0)
        assert exc_info.value.attempts == 3
        assert is_rate_limit_error(exc_info.value.last_error)

    def test_zero_attempts_still_tries_once(self) -> None:
        calls = {"count": 0}

        def operation() -> None:
            calls["count"] += 1
            raise requests.Timeout("slow")

        with pytest.raises(RetryExhaustedError) as exc_info:
            retry_call(operation, max_attempts=0)
        assert calls["count"] == 1
        assert exc_info.value.attempts == 1
        assert isinstance(exc_info.value.last_error, requests.Timeout)

    def test_custom_predicate(self) -> None:
        attempts = {"count": 0}

        def operation() -> str:
            attempts["count"] += 1
            if attempts["count"] < 2:
                raise ValueError("flaky")
            return "done"

        result = retry_call(operation, should_retry=lambda exc: isinstance(exc, ValueError))
        assert result == "done"
        assert attempts["count"] == 2
