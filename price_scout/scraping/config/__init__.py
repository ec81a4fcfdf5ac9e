"""
Config helpers for the pricing pipeline.
"""

from price_scout.scraping.config.loader import (
    get_pricing_pipeline_settings,
    load_competitor_stubs,
    parse_competitor_stub,
)
from price_scout.scraping.config.models import (
    ClassifierSettings,
    DiscoverySettings,
    ExtractionSettings,
    HTTPFetchSettings,
    PricingPipelineSettings,
    ScrapeSettings,
    SearchSettings,
)

__all__ = [
    "ClassifierSettings",
    "DiscoverySettings",
    "ExtractionSettings",
    "HTTPFetchSettings",
    "PricingPipelineSettings",
    "ScrapeSettings",
    "SearchSettings",
    "get_pricing_pipeline_settings",
    "load_competitor_stubs",
    "parse_competitor_stub",
]
