"""
Brave Web Search adapter.
"""

from __future__ import annotations

from typing import Any

from price_scout.domain.competitor_pricing import SearchCandidate, SearchProviderName
from price_scout.scraping.search.base import SearchProvider, SearchRequest

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


class BraveSearchProvider(SearchProvider):
    """
    Brave Search API client; supports several subscription tokens.
    """

    name = SearchProviderName.BRAVE

    def build_request(self, *, query: str, count: int, api_key: str | None) -> SearchRequest:
        return SearchRequest(
            url=BRAVE_SEARCH_URL,
            params={"q": query, "count": count},
            headers={
                "Accept": "application/json",
                "X-Subscription-Token": api_key or "",
            },
        )

    def parse_results(self, payload: Any) -> list[SearchCandidate]:
        if not isinstance(payload, dict):
            return []
        web = payload.get("web") or {}
        results = web.get("results") if isinstance(web, dict) else None
        if not isinstance(results, list):
            return []

        candidates: list[SearchCandidate] = []
        for rank, item in enumerate(results, start=1):
            if not isinstance(item, dict) or not item.get("url"):
                continue
            candidates.append(
                SearchCandidate(
                    url=str(item["url"]),
                    title=str(item.get("title") or ""),
                    snippet=str(item.get("description") or ""),
                    source_provider=self.name,
                    rank=rank,
                )
            )
        return candidates
