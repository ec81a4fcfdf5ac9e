"""
Fan-out search across several providers with merged, deduplicated results.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from urllib.parse import urlparse

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import SearchCandidate, SearchResponse
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.search.base import SearchProvider

logger = logging.getLogger(__name__)


def candidate_key(url: str) -> str:
    """
    URL identity used for cross-provider dedupe: host without www, path, no slash.
    """

    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    path = parsed.path.rstrip("/")
    query = f"?{parsed.query}" if parsed.query else ""
    return f"{host}{path}{query}"


def merge_candidates(responses: Sequence[SearchResponse]) -> list[SearchCandidate]:
    """
    Concatenate candidates in response order keeping the first of each URL.
    """

    merged: list[SearchCandidate] = []
    seen: set[str] = set()
    for response in responses:
        for candidate in response.candidates:
            key = candidate_key(candidate.url)
            if key in seen:
                continue
            seen.add(key)
            merged.append(candidate)
    return merged


class MultiProviderSearch:
    """
    Runs one query against every provider, primary provider's ordering first.
    """

    def __init__(self, providers: Sequence[SearchProvider], *, primary: str | None = None) -> None:
        if not providers:
            raise ValueError("MultiProviderSearch needs at least one provider.")
        ordered = list(providers)
        if primary:
            ordered.sort(key=lambda provider: provider.name.value != primary)
        self._providers = ordered

    @property
    def providers(self) -> list[SearchProvider]:
        return list(self._providers)

    def search(self, query: str, count: int | None = None) -> SearchResponse:
        responses = [provider.search(query, count) for provider in self._providers]
        candidates = merge_candidates(responses)

        error: str | None = None
        failed = [response for response in responses if not response.ok]
        if not candidates and len(failed) == len(responses):
            errors = {response.error for response in failed}
            error = reason_codes.RATE_LIMITED if reason_codes.RATE_LIMITED in errors else failed[0].error

        log_event(
            logger,
            logging.INFO,
            "multi_search_completed",
            query=query,
            providers=[response.provider for response in responses],
            failed_providers=[response.provider for response in failed],
            candidates=len(candidates),
        )
        return SearchResponse(
            provider="multi",
            query=query,
            candidates=candidates,
            error=error,
            from_cache=all(response.from_cache for response in responses),
            blocked=sum(response.blocked for response in responses),
        )

    def clear_cache(self) -> None:
        for provider in self._providers:
            provider.cache.clear()

    def cache_stats(self) -> dict[str, dict[str, int]]:
        return {provider.name.value: provider.cache.stats() for provider in self._providers}
