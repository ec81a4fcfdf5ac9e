"""
DuckDuckGo HTML results adapter (no API key).
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qs, urlparse

import requests
from bs4 import BeautifulSoup

from price_scout.domain.competitor_pricing import SearchCandidate, SearchProviderName
from price_scout.scraping.search.base import SearchProvider, SearchRequest

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"
BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def decode_result_url(href: str) -> str | None:
    """
    Unwrap DuckDuckGo's `/l/?uddg=` redirect links; drop internal links.
    """

    if not href:
        return None
    if href.startswith("//"):
        href = f"https:{href}"

    parsed = urlparse(href)
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg", [None])[0]
        return target or None
    if "duckduckgo.com" in (parsed.hostname or ""):
        return None
    if parsed.scheme not in {"http", "https"}:
        return None
    return href


class DuckDuckGoSearchProvider(SearchProvider):
    """
    Scrapes the DuckDuckGo HTML endpoint as a keyless secondary source.
    """

    name = SearchProviderName.DUCKDUCKGO
    requires_api_key = False

    def build_request(self, *, query: str, count: int, api_key: str | None) -> SearchRequest:
        return SearchRequest(
            url=DUCKDUCKGO_HTML_URL,
            params={"q": query},
            headers={"User-Agent": BROWSER_USER_AGENT, "Accept": "text/html"},
        )

    def decode(self, response: requests.Response) -> Any:
        return response.text

    def parse_results(self, payload: Any) -> list[SearchCandidate]:
        if not isinstance(payload, str) or not payload:
            return []

        soup = BeautifulSoup(payload, "html.parser")
        candidates: list[SearchCandidate] = []
        for result in soup.select(".result"):
            link = result.select_one("a.result__a")
            if link is None:
                continue
            url = decode_result_url(str(link.get("href") or ""))
            if url is None:
                continue
            snippet = result.select_one(".result__snippet")
            candidates.append(
                SearchCandidate(
                    url=url,
                    title=link.get_text(" ", strip=True),
                    snippet=snippet.get_text(" ", strip=True) if snippet is not None else "",
                    source_provider=self.name,
                    rank=len(candidates) + 1,
                )
            )
        return candidates
