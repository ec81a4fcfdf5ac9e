"""
Base search provider abstraction and shared request mechanics.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import requests

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import SearchCandidate, SearchProviderName, SearchResponse
from price_scout.scraping.classifier import is_blocked_domain
from price_scout.scraping.config.models import SearchSettings
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.retry import (
    RETRYABLE_STATUS_CODES,
    RetryExhaustedError,
    TransientRequestError,
    is_rate_limit_error,
    random_delay,
    retry_call,
)
from price_scout.scraping.search.cache import SearchResultCache

logger = logging.getLogger(__name__)


class SearchRequestError(RuntimeError):
    """
    Raised when a provider answers with a payload it cannot decode.
    """


class SearchClient(Protocol):
    def search(self, query: str, count: int | None = None) -> SearchResponse: ...


@dataclass(frozen=True)
class SearchRequest:
    url: str
    params: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


class SearchProvider(ABC):
    """
    One web search backend with caching, key rotation and retry.
    """

    name: SearchProviderName
    requires_api_key: bool = True

    def __init__(
        self,
        *,
        settings: SearchSettings,
        api_keys: Sequence[str] = (),
        session: requests.Session | None = None,
        cache: SearchResultCache | None = None,
    ) -> None:
        self.settings = settings
        self._api_keys = tuple(key for key in api_keys if key)
        self._key_cursor = 0
        self._key_lock = threading.Lock()
        self._session = session or requests.Session()
        self._cache = cache or SearchResultCache(ttl_seconds=settings.cache_ttl_seconds)

    @property
    def cache(self) -> SearchResultCache:
        return self._cache

    def search(self, query: str, count: int | None = None) -> SearchResponse:
        """
        Return candidates for `query`, or an error response when giving up.
        """

        query = query.strip()
        result_count = count or self.settings.result_count
        provider = self.name.value
        if not query:
            return SearchResponse(provider=provider, query=query)

        cache_key = SearchResultCache.make_key(provider, query, result_count)
        cached = self._cache.get(cache_key)
        if cached is not None:
            log_event(logger, logging.DEBUG, "search_cache_hit", provider=provider, query=query)
            return SearchResponse(
                provider=provider,
                query=query,
                candidates=cached,
                from_cache=True,
            )

        if self.requires_api_key and not self._api_keys:
            log_event(
                logger,
                logging.WARNING,
                "search_api_key_missing",
                provider=provider,
                query=query,
            )
            return SearchResponse(provider=provider, query=query, error=reason_codes.API_KEY_MISSING)

        random_delay(*self.settings.pre_request_delay_seconds)
        try:
            payload = retry_call(
                lambda: self._execute(query, result_count),
                max_attempts=self.settings.max_attempts,
                base_delay_seconds=self.settings.backoff_base_seconds,
                max_delay_seconds=self.settings.backoff_max_seconds,
                description=f"search provider={provider}",
            )
        except RetryExhaustedError as exc:
            error = (
                reason_codes.RATE_LIMITED
                if is_rate_limit_error(exc.last_error)
                else reason_codes.SEARCH_FAILED
            )
            log_event(
                logger,
                logging.ERROR,
                "search_retries_exhausted",
                provider=provider,
                query=query,
                attempts=exc.attempts,
                error=str(exc.last_error),
            )
            return SearchResponse(provider=provider, query=query, error=error)
        except (requests.RequestException, SearchRequestError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "search_request_failed",
                provider=provider,
                query=query,
                error=str(exc),
            )
            return SearchResponse(provider=provider, query=query, error=reason_codes.SEARCH_FAILED)

        allowed: list[SearchCandidate] = []
        blocked = 0
        for candidate in self.parse_results(payload):
            if not candidate.url:
                continue
            if is_blocked_domain(candidate.url):
                blocked += 1
                continue
            allowed.append(candidate)
        candidates = allowed[:result_count]
        if candidates:
            self._cache.set(cache_key, candidates)
        log_event(
            logger,
            logging.INFO,
            "search_completed",
            provider=provider,
            query=query,
            candidates=len(candidates),
            blocked=blocked,
        )
        return SearchResponse(provider=provider, query=query, candidates=candidates, blocked=blocked)

    @abstractmethod
    def build_request(self, *, query: str, count: int, api_key: str | None) -> SearchRequest:
        """
        Describe the HTTP GET for one search call.
        """

    @abstractmethod
    def parse_results(self, payload: Any) -> list[SearchCandidate]:
        """
        Map a decoded provider payload to ranked candidates.
        """

    def decode(self, response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise SearchRequestError(f"{self.name.value}: response was not valid JSON.") from exc

    def current_api_key(self) -> str | None:
        if not self._api_keys:
            return None
        with self._key_lock:
            return self._api_keys[self._key_cursor % len(self._api_keys)]

    def rotate_api_key(self) -> None:
        if len(self._api_keys) < 2:
            return
        with self._key_lock:
            self._key_cursor = (self._key_cursor + 1) % len(self._api_keys)
            cursor = self._key_cursor
        log_event(logger, logging.INFO, "search_api_key_rotated", provider=self.name.value, key_index=cursor)

    def _execute(self, query: str, count: int) -> Any:
        request = self.build_request(query=query, count=count, api_key=self.current_api_key())
        response = self._session.get(
            request.url,
            params=request.params,
            headers=request.headers,
            timeout=self.settings.timeout_seconds,
        )
        if response.status_code == 429:
            self.rotate_api_key()
            raise TransientRequestError(f"{self.name.value}: rate limited", status_code=429)
        if response.status_code in RETRYABLE_STATUS_CODES:
            raise requests.HTTPError(
                f"Retryable HTTP status code: {response.status_code}",
                response=response,
            )
        response.raise_for_status()
        return self.decode(response)
