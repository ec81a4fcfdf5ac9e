"""
Web search clients used by website discovery.
"""

from price_scout.scraping.search.base import (
    SearchClient,
    SearchProvider,
    SearchRequest,
    SearchRequestError,
)
from price_scout.scraping.search.bing import BingSearchProvider
from price_scout.scraping.search.brave import BraveSearchProvider
from price_scout.scraping.search.cache import SearchResultCache
from price_scout.scraping.search.duckduckgo import DuckDuckGoSearchProvider
from price_scout.scraping.search.multi import MultiProviderSearch, merge_candidates
from price_scout.scraping.search.registry import SearchProviderRegistry, build_search_client

__all__ = [
    "BingSearchProvider",
    "BraveSearchProvider",
    "DuckDuckGoSearchProvider",
    "MultiProviderSearch",
    "SearchClient",
    "SearchProvider",
    "SearchProviderRegistry",
    "SearchRequest",
    "SearchRequestError",
    "SearchResultCache",
    "build_search_client",
    "merge_candidates",
]
