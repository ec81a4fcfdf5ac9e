"""
Search provider registry and client factory.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping

import requests

from price_scout.scraping.config.models import SearchSettings
from price_scout.scraping.search.base import SearchClient, SearchProvider
from price_scout.scraping.search.bing import BingSearchProvider
from price_scout.scraping.search.brave import BraveSearchProvider
from price_scout.scraping.search.cache import SearchResultCache
from price_scout.scraping.search.duckduckgo import DuckDuckGoSearchProvider
from price_scout.scraping.search.multi import MultiProviderSearch


class SearchProviderRegistry:
    """
    Provider registry supporting built-ins and dynamic import paths.
    """

    def __init__(self, registrations: Mapping[str, type[SearchProvider]] | None = None) -> None:
        builtins: dict[str, type[SearchProvider]] = {
            "brave": BraveSearchProvider,
            "bing": BingSearchProvider,
            "duckduckgo": DuckDuckGoSearchProvider,
        }
        if registrations:
            builtins.update(registrations)
        self._registrations = builtins

    def register(self, *, provider_name: str, provider_class: type[SearchProvider]) -> None:
        self._registrations[provider_name.strip().lower()] = provider_class

    def create_provider(
        self,
        *,
        provider_name: str,
        settings: SearchSettings,
        session: requests.Session,
        cache: SearchResultCache,
    ) -> SearchProvider:
        provider_class = self._resolve_provider_class(provider_name)
        return provider_class(
            settings=settings,
            api_keys=self._api_keys_for(provider_name, settings),
            session=session,
            cache=cache,
        )

    @staticmethod
    def _api_keys_for(provider_name: str, settings: SearchSettings) -> tuple[str, ...]:
        if provider_name == "brave":
            return settings.brave_api_keys
        if provider_name == "bing":
            return settings.bing_api_keys
        return ()

    def _resolve_provider_class(self, provider_name: str) -> type[SearchProvider]:
        if ":" in provider_name:
            return self._load_dynamic_class(provider_name)

        resolved = self._registrations.get(provider_name.strip().lower())
        if resolved is None:
            allowed = ", ".join(sorted(self._registrations.keys()))
            raise ValueError(f"Unknown search provider='{provider_name}'. Allowed providers: {allowed}.")
        return resolved

    @staticmethod
    def _load_dynamic_class(path: str) -> type[SearchProvider]:
        module_path, class_name = path.split(":", 1)
        module = importlib.import_module(module_path)
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise ValueError(f"Unable to resolve search provider class '{path}'.")
        if not isinstance(loaded, type) or not issubclass(loaded, SearchProvider):
            raise ValueError(f"Class '{path}' must inherit from SearchProvider.")
        return loaded


def build_search_client(
    settings: SearchSettings,
    *,
    session: requests.Session | None = None,
    registry: SearchProviderRegistry | None = None,
) -> SearchClient:
    """
    Build the configured provider, or a multi-provider fan-out for several.
    """

    registry = registry or SearchProviderRegistry()
    session = session or requests.Session()
    cache = SearchResultCache(ttl_seconds=settings.cache_ttl_seconds)
    providers = [
        registry.create_provider(provider_name=name, settings=settings, session=session, cache=cache)
        for name in dict.fromkeys(settings.providers)
    ]
    if not providers:
        raise ValueError("No search providers configured.")
    if len(providers) == 1:
        return providers[0]
    return MultiProviderSearch(providers, primary=settings.primary_provider)
