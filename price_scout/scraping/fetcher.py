"""
HTTP page fetcher for candidate websites and service pages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from urllib.parse import urlparse

import requests

from price_scout.scraping.config.models import HTTPFetchSettings
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.rate_limiter import DomainRateLimiter
from price_scout.scraping.retry import (
    RETRYABLE_STATUS_CODES,
    RetryExhaustedError,
    retry_call,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


def normalize_url(url: str | None) -> str | None:
    """
    Add a scheme when missing and reject values without a usable host.
    """

    if url is None:
        return None
    candidate = url.strip()
    if not candidate or candidate == "#":
        return None
    if "://" not in candidate:
        candidate = f"https://{candidate.lstrip('/')}"

    parsed = urlparse(candidate)
    if parsed.scheme not in {"http", "https"}:
        return None
    host = (parsed.hostname or "").strip(".")
    if not host or "." not in host or " " in host:
        return None
    return candidate


class HtmlFetcher:
    """
    Fetches page HTML with browser-like headers and bounded retries.

    Failures never raise: callers get `None` and move on to the next candidate.
    """

    def __init__(
        self,
        *,
        settings: HTTPFetchSettings,
        session: requests.Session | None = None,
        rate_limiter: DomainRateLimiter | None = None,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()
        self.rate_limiter = rate_limiter or DomainRateLimiter(
            default_rate_limit_per_second=settings.rate_limit_per_second
        )
        self.request_headers = {"User-Agent": settings.user_agent, **DEFAULT_HEADERS}

    def fetch(
        self,
        url: str | None,
        *,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
    ) -> str | None:
        """
        Return the page body, or None on any permanent or exhausted failure.
        """

        target = normalize_url(url)
        if target is None:
            log_event(logger, logging.DEBUG, "fetch_skipped_invalid_url", url=url)
            return None

        timeout = timeout_seconds if timeout_seconds is not None else self.settings.timeout_seconds
        retries = self.settings.max_retries if max_retries is None else max(0, max_retries)

        try:
            response = retry_call(
                lambda: self._get(target, timeout),
                max_attempts=retries + 1,
                base_delay_seconds=self.settings.backoff_seconds,
                max_delay_seconds=max(self.settings.backoff_seconds, 10.0),
                description=f"fetch url={target}",
            )
        except RetryExhaustedError as exc:
            log_event(
                logger,
                logging.WARNING,
                "fetch_retries_exhausted",
                url=target,
                attempts=exc.attempts,
                error=str(exc.last_error),
            )
            return None
        except requests.RequestException as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            log_event(
                logger,
                logging.INFO,
                "fetch_failed",
                url=target,
                status_code=status_code,
                error=str(exc),
            )
            return None

        content_type = (response.headers.get("Content-Type") or "").lower()
        if content_type and "html" not in content_type and "text" not in content_type:
            log_event(logger, logging.INFO, "fetch_non_html", url=target, content_type=content_type)
            return None

        log_event(
            logger,
            logging.DEBUG,
            "page_fetched",
            url=target,
            status_code=response.status_code,
            length=len(response.text),
        )
        return response.text

    def fetch_many(self, urls: Iterable[str]) -> dict[str, str | None]:
        """
        Fetch several pages one after another, keyed by the requested URL.
        """

        return {url: self.fetch(url) for url in urls}

    def _get(self, url: str, timeout: float) -> requests.Response:
        self.rate_limiter.wait(url=url)
        response = self.session.get(
            url,
            headers=self.request_headers,
            timeout=timeout,
            allow_redirects=True,
        )
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise requests.HTTPError(
                f"Retryable status={response.status_code}",
                response=response,
            )
        response.raise_for_status()
        return response
