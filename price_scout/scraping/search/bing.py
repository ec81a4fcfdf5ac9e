"""
Bing Web Search adapter.
"""

from __future__ import annotations

from typing import Any

from price_scout.domain.competitor_pricing import SearchCandidate, SearchProviderName
from price_scout.scraping.search.base import SearchProvider, SearchRequest

BING_SEARCH_URL = "https://api.bing.microsoft.com/v7.0/search"


class BingSearchProvider(SearchProvider):
    name = SearchProviderName.BING

    def build_request(self, *, query: str, count: int, api_key: str | None) -> SearchRequest:
        return SearchRequest(
            url=BING_SEARCH_URL,
            params={"q": query, "count": count, "mkt": "en-US"},
            headers={"Ocp-Apim-Subscription-Key": api_key or ""},
        )

    def parse_results(self, payload: Any) -> list[SearchCandidate]:
        if not isinstance(payload, dict):
            return []
        pages = payload.get("webPages") or {}
        values = pages.get("value") if isinstance(pages, dict) else None
        if not isinstance(values, list):
            return []

        return [
            SearchCandidate(
                url=str(item["url"]),
                title=str(item.get("name") or ""),
                snippet=str(item.get("snippet") or ""),
                source_provider=self.name,
                rank=rank,
            )
            for rank, item in enumerate(values, start=1)
            if isinstance(item, dict) and item.get("url")
        ]
