"""
Pricing pipeline configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class HTTPFetchSettings:
    """
    Outbound page fetch settings.
    """

    user_agent: str
    timeout_seconds: float = 10.0
    max_retries: int = 2
    backoff_seconds: float = 1.0
    rate_limit_per_second: float = 2.0


@dataclass(frozen=True)
class SearchSettings:
    """
    Web search provider settings.
    """

    providers: tuple[str, ...] = ("brave", "duckduckgo")
    primary_provider: str = "brave"
    brave_api_keys: tuple[str, ...] = ()
    bing_api_keys: tuple[str, ...] = ()
    result_count: int = 5
    timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 86400.0
    max_attempts: int = 3
    backoff_base_seconds: float = 2.0
    backoff_max_seconds: float = 10.0
    pre_request_delay_seconds: tuple[float, float] = (0.3, 1.1)
    query_delay_seconds: float = 1.0


@dataclass(frozen=True)
class ClassifierSettings:
    real_threshold: int = 20
    min_keywords: int = 2


@dataclass(frozen=True)
class DiscoverySettings:
    enabled: bool = True
    top_k: int = 3
    js_only_min_chars: int = 5000
    high_confidence_score: int = 40
    medium_confidence_score: int = 25


@dataclass(frozen=True)
class ExtractionSettings:
    min_price: float = 10.0
    max_price: float = 300.0
    min_signal_services: int = 2
    max_elements: int = 300


@dataclass(frozen=True)
class ScrapeSettings:
    concurrency: int = 2
    min_discovery_score: int = 20
    max_pages: int = 4
    browser_enabled: bool = False
    browser_timeout_seconds: float = 30.0
    common_paths: tuple[str, ...] = ("/services", "/pricing", "/menu", "/price-list")


@dataclass(frozen=True)
class PricingPipelineSettings:
    """
    Runtime settings for discovery, extraction and orchestration.
    """

    http: HTTPFetchSettings
    search: SearchSettings = field(default_factory=SearchSettings)
    classifier: ClassifierSettings = field(default_factory=ClassifierSettings)
    discovery: DiscoverySettings = field(default_factory=DiscoverySettings)
    extraction: ExtractionSettings = field(default_factory=ExtractionSettings)
    scrape: ScrapeSettings = field(default_factory=ScrapeSettings)
