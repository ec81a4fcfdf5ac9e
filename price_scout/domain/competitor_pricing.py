"""
price_scout/domain/competitor_pricing.py

Domain value objects for website discovery and competitor price extraction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SearchProviderName(str, Enum):
    BRAVE = "brave"
    BING = "bing"
    DUCKDUCKGO = "duckduckgo"


class WebsiteConfidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    def lowered(self) -> WebsiteConfidence:
        """
        Return the next lower confidence bucket (LOW stays LOW).
        """

        if self is WebsiteConfidence.HIGH:
            return WebsiteConfidence.MEDIUM
        return WebsiteConfidence.LOW


class ServiceCategory(str, Enum):
    GEL = "gel"
    PEDICURE = "pedicure"
    ACRYLIC = "acrylic"
    DIP = "dip"
    MANICURE = "manicure"
    OTHER = "other"


class PriceSource(str, Enum):
    SCRAPED = "scraped"
    ESTIMATED = "estimated"
    SKIPPED = "skipped"


TRACKED_CATEGORIES: tuple[ServiceCategory, ...] = (
    ServiceCategory.GEL,
    ServiceCategory.PEDICURE,
    ServiceCategory.ACRYLIC,
)


@dataclass(frozen=True)
class CompetitorStub:
    """
    One nearby competitor as supplied by the caller.
    """

    name: str
    address: str
    phone: str | None = None
    known_website: str | None = None
    price_level: int | None = None


@dataclass(frozen=True)
class SearchCandidate:
    """
    One web search hit, tagged with the provider that produced it.
    """

    url: str
    title: str
    snippet: str
    source_provider: SearchProviderName
    rank: int


@dataclass(frozen=True)
class SearchResponse:
    """
    Outcome of one search call. `error` is set when the provider gave up.
    `blocked` counts hits dropped by the hard blocklist before returning.
    """

    provider: str
    query: str
    candidates: list[SearchCandidate] = field(default_factory=list)
    error: str | None = None
    from_cache: bool = False
    blocked: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class DomainVerdict:
    """
    Classifier verdict for one candidate URL.
    """

    domain: str
    score: int
    is_real: bool
    reason: str
    unique_positive_keywords: int = 0


@dataclass(frozen=True)
class DiscoveredWebsite:
    """
    Result of website discovery for one business.
    """

    homepage: str | None
    services_page: str | None
    menu_page: str | None
    confidence: WebsiteConfidence
    score: int
    success: bool
    reason: str | None = None
    search_query: str | None = None
    js_rendered: bool = False

    @property
    def scrape_target(self) -> str | None:
        """
        Best page to scrape: services page, then menu page, then homepage.
        """

        return self.services_page or self.menu_page or self.homepage


@dataclass(frozen=True)
class ExtractedService:
    """
    One service/price pair pulled out of a page.
    """

    service_name: str
    service_type: ServiceCategory
    price: float
    confidence: float
    source: str
    price_range: tuple[float, float] | None = None


@dataclass(frozen=True)
class ScrapeDecision:
    should_scrape: bool
    reason: str


@dataclass(frozen=True)
class ScrapeOutcome:
    """
    Services collected by one page scraper run for a single competitor.
    """

    services: list[ExtractedService] = field(default_factory=list)
    pages_attempted: int = 0
    pages_fetched: int = 0
    page_url: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class TierEstimate:
    gel: float
    pedicure: float
    acrylic: float


@dataclass(frozen=True)
class PriceResult:
    """
    Final per-competitor pricing answer with provenance.

    A skipped result never carries prices; a scraped result always carries
    at least one category price.
    """

    source: PriceSource
    success: bool
    confidence: float = 0.0
    gel: float | None = None
    pedicure: float | None = None
    acrylic: float | None = None
    dip: float | None = None
    manicure: float | None = None
    reason: str | None = None
    page_url: str | None = None
    services: tuple[ExtractedService, ...] = ()

    def category_prices(self) -> dict[str, float]:
        prices = {
            "gel": self.gel,
            "pedicure": self.pedicure,
            "acrylic": self.acrylic,
            "dip": self.dip,
            "manicure": self.manicure,
        }
        return {key: value for key, value in prices.items() if value is not None}

    @classmethod
    def skipped(cls, reason: str) -> PriceResult:
        return cls(source=PriceSource.SKIPPED, success=False, reason=reason)

    @classmethod
    def estimated(
        cls,
        estimate: TierEstimate,
        *,
        reason: str,
        page_url: str | None = None,
    ) -> PriceResult:
        return cls(
            source=PriceSource.ESTIMATED,
            success=False,
            gel=estimate.gel,
            pedicure=estimate.pedicure,
            acrylic=estimate.acrylic,
            reason=reason,
            page_url=page_url,
        )
