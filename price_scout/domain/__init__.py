"""
price_scout/domain package marker.
"""

from price_scout.domain.competitor_pricing import (
    TRACKED_CATEGORIES,
    CompetitorStub,
    DiscoveredWebsite,
    DomainVerdict,
    ExtractedService,
    PriceResult,
    PriceSource,
    ScrapeDecision,
    ScrapeOutcome,
    SearchCandidate,
    SearchProviderName,
    SearchResponse,
    ServiceCategory,
    TierEstimate,
    WebsiteConfidence,
)

__all__ = [
    "TRACKED_CATEGORIES",
    "CompetitorStub",
    "DiscoveredWebsite",
    "DomainVerdict",
    "ExtractedService",
    "PriceResult",
    "PriceSource",
    "ScrapeDecision",
    "ScrapeOutcome",
    "SearchCandidate",
    "SearchProviderName",
    "SearchResponse",
    "ServiceCategory",
    "TierEstimate",
    "WebsiteConfidence",
]
