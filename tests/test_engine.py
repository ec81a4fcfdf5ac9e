"""
tests/test_engine.py

Unit tests for PricingScrapeEngine: scrape decisions, discovery hand-off,
page planning, estimate fallback and batch partitioning.

Coverage
--------
- Decision rules in order: no URL, invalid, blocked, low score, scrape
- "#" placeholder website is skipped without any request
- Service link on the homepage is followed to the menu page
- No extractable content and scraper errors fall back to tier estimates
- Browser scraper runs only when enabled and static scraping found nothing
- Blocked known website triggers discovery of the real site
- Discovery failures and errors keep the original skip reason
- Batch results cover every input, in input order
"""

from __future__ import annotations

import dataclasses

import pytest
from fakes import FakeResponse, FakeSearchClient, FakeSession

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import (
    CompetitorStub,
    DiscoveredWebsite,
    PriceSource,
    ScrapeDecision,
    SearchCandidate,
    SearchProviderName,
    SearchResponse,
    WebsiteConfidence,
)
from price_scout.scraping.base import PriceScraperBase
from price_scout.scraping.classifier import DomainClassifier
from price_scout.scraping.config.models import PricingPipelineSettings
from price_scout.scraping.discovery import WebsiteDiscoveryEngine, build_queries
from price_scout.scraping.engine import PricingScrapeEngine
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.parsing import PriceExtractor
from price_scout.scraping.registry import ScraperRegistry

ADDRESS = "12 Main St, Springfield, IL 62701"

MENU_PAGE = """
<html><body>
  <table>
    <tr><td>Gel Manicure</td><td>$35</td></tr>
    <tr><td>Spa Pedicure</td><td>$45</td></tr>
    <tr><td>Acrylic Full Set</td><td>$55</td></tr>
  </table>
</body></html>
"""

HOME_WITH_SERVICES_LINK = """
<html><body>
  <a href="/services">Our Services</a>
  <p>Welcome to Luxury Nails</p>
</body></html>
"""

HOME_WITHOUT_PRICES = "<html><body><p>Welcome to Luxury Nails. Call us today.</p></body></html>"

SALON_HOMEPAGE = """
<html><body>
  <nav><a href="/services">Services</a> <a href="/nail-menu">Menu</a></nav>
  <p>Nail salon offering manicure, pedicure, gel and acrylic.
  Book now or make an appointment. See our pricing.</p>
</body></html>
"""


class ExplodingScraper(PriceScraperBase):
    def scrape(self, url, *, competitor, extra_pages=()):
        raise RuntimeError("parser crashed")

    def load_page(self, url: str) -> str | None:
        return None


class CannedBrowserScraper(PriceScraperBase):
    calls: list[str] = []

    def load_page(self, url: str) -> str | None:
        CannedBrowserScraper.calls.append(url)
        return MENU_PAGE


class RaisingDiscovery:
    def __init__(self) -> None:
        self.calls = 0

    def discover(self, name: str, address: str, phone: str | None = None) -> DiscoveredWebsite:
        self.calls += 1
        raise RuntimeError("search backend down")


class CannedDiscovery:
    def __init__(self, discovered: DiscoveredWebsite) -> None:
        self.discovered = discovered
        self.calls = 0

    def discover(self, name: str, address: str, phone: str | None = None) -> DiscoveredWebsite:
        self.calls += 1
        return self.discovered


def _engine(
    settings: PricingPipelineSettings,
    session: FakeSession,
    **kwargs,
) -> PricingScrapeEngine:
    return PricingScrapeEngine(settings=settings, session=session, **kwargs)


# ---------------------------------------------------------------------------
# Decision
# ---------------------------------------------------------------------------


class TestDecide:
    @pytest.mark.parametrize(
        ("url", "score", "reason"),
        [
            (None, None, reason_codes.NO_URL),
            ("", None, reason_codes.NO_URL),
            ("#", None, reason_codes.NO_URL),
            ("not a url", None, reason_codes.INVALID_URL),
            ("https://www.facebook.com/luxurynails", None, reason_codes.BLOCKED_DOMAIN),
            ("https://www.facebook.com/luxurynails", 5, reason_codes.BLOCKED_DOMAIN),
            ("https://luxurynails.com", 10, reason_codes.LOW_CONFIDENCE_WEBSITE),
        ],
    )
    def test_skip_reasons(
        self,
        pipeline_settings: PricingPipelineSettings,
        fake_session: FakeSession,
        url: str | None,
        score: int | None,
        reason: str,
    ) -> None:
        decision = _engine(pipeline_settings, fake_session).decide(url, score)
        assert decision.should_scrape is False
        assert decision.reason == reason

    @pytest.mark.parametrize("score", [None, 20, 75])
    def test_scrape(
        self,
        pipeline_settings: PricingPipelineSettings,
        fake_session: FakeSession,
        score: int | None,
    ) -> None:
        decision = _engine(pipeline_settings, fake_session).decide("https://luxurynails.com", score)
        assert decision.should_scrape is True
        assert decision.reason == reason_codes.SCRAPE


# ---------------------------------------------------------------------------
# scrape_one
# ---------------------------------------------------------------------------


class TestScrapeOne:
    def test_placeholder_website_is_skipped(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        result = _engine(pipeline_settings, fake_session).scrape_one("Luxury Nails", "#")

        assert result.source is PriceSource.SKIPPED
        assert result.success is False
        assert result.reason == reason_codes.NO_URL
        assert result.category_prices() == {}
        assert fake_session.calls == []

    def test_unparseable_target_is_skipped(
        self,
        pipeline_settings: PricingPipelineSettings,
        fake_session: FakeSession,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        engine = _engine(pipeline_settings, fake_session)
        monkeypatch.setattr(
            engine,
            "decide",
            lambda url, discovery_score=None: ScrapeDecision(should_scrape=True, reason=reason_codes.SCRAPE),
        )

        result = engine.scrape_one("Luxury Nails", "not a url")

        assert result.source is PriceSource.SKIPPED
        assert result.reason == reason_codes.INVALID_URL
        assert fake_session.calls == []

    def test_unknown_scraper_type_is_rejected(self, pipeline_settings: PricingPipelineSettings) -> None:
        registry = ScraperRegistry()
        with pytest.raises(ValueError, match="Unknown scraper_type"):
            registry.create_scraper(
                "price_scout.scraping.scrapers:StaticPriceScraper",
                settings=pipeline_settings,
                extractor=PriceExtractor(pipeline_settings.extraction),
                fetcher=HtmlFetcher(settings=pipeline_settings.http, session=FakeSession()),
            )

    def test_follows_services_link_from_homepage(self, pipeline_settings: PricingPipelineSettings) -> None:
        session = FakeSession(
            {
                "https://luxurynails.com": FakeResponse(text=HOME_WITH_SERVICES_LINK),
                "https://luxurynails.com/services": FakeResponse(text=MENU_PAGE),
            }
        )
        result = _engine(pipeline_settings, session).scrape_one("Luxury Nails", "https://luxurynails.com")

        assert result.source is PriceSource.SCRAPED
        assert result.success is True
        assert result.page_url == "https://luxurynails.com/services"
        assert result.category_prices() == {"gel": 35.0, "pedicure": 45.0, "acrylic": 55.0}
        assert result.confidence == 1.0
        assert session.urls_called() == ["https://luxurynails.com", "https://luxurynails.com/services"]

    def test_no_content_falls_back_to_estimate(self, pipeline_settings: PricingPipelineSettings) -> None:
        session = FakeSession({"https://luxurynails.com": FakeResponse(text=HOME_WITHOUT_PRICES)})
        result = _engine(pipeline_settings, session).scrape_one(
            "Luxury Nails", "https://luxurynails.com", price_level=3
        )

        assert result.source is PriceSource.ESTIMATED
        assert result.success is False
        assert result.reason == reason_codes.NO_EXTRACTABLE_CONTENT
        assert (result.gel, result.pedicure, result.acrylic) == (50.0, 60.0, 70.0)
        assert result.page_url == "https://luxurynails.com"
        # Homepage plus common paths, bounded by max_pages.
        assert len(session.calls) == pipeline_settings.scrape.max_pages

    def test_scraper_error_falls_back_to_estimate(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        registry = ScraperRegistry({"static": ExplodingScraper})
        result = _engine(pipeline_settings, fake_session, registry=registry).scrape_one(
            "Luxury Nails", "luxurynails.com"
        )

        assert result.source is PriceSource.ESTIMATED
        assert result.reason == reason_codes.SCRAPE_ERROR
        assert result.page_url == "https://luxurynails.com"
        assert (result.gel, result.pedicure, result.acrylic) == (40.0, 45.0, 55.0)

    def test_browser_runs_only_when_enabled(self, pipeline_settings: PricingPipelineSettings) -> None:
        CannedBrowserScraper.calls = []
        registry = ScraperRegistry({"browser": CannedBrowserScraper})
        session = FakeSession()

        disabled = _engine(pipeline_settings, session, registry=registry).scrape_one(
            "Luxury Nails", "https://luxurynails.com"
        )
        assert disabled.source is PriceSource.ESTIMATED
        assert CannedBrowserScraper.calls == []

        enabled_settings = dataclasses.replace(
            pipeline_settings,
            scrape=dataclasses.replace(pipeline_settings.scrape, browser_enabled=True),
        )
        enabled = _engine(enabled_settings, session, registry=registry).scrape_one(
            "Luxury Nails", "https://luxurynails.com"
        )
        assert enabled.source is PriceSource.SCRAPED
        assert enabled.gel == 35.0
        assert CannedBrowserScraper.calls == ["https://luxurynails.com"]


# ---------------------------------------------------------------------------
# Resolution and discovery
# ---------------------------------------------------------------------------


class TestResolve:
    def test_blocked_website_discovers_real_site(self, pipeline_settings: PricingPipelineSettings) -> None:
        name = "Luxury Nails Spa"
        address = "135 S Main St, Mount Vernon, OH"
        query = build_queries(name, address)[0]
        session = FakeSession(
            {
                "https://luxurynails.com": FakeResponse(text=SALON_HOMEPAGE),
                "https://luxurynails.com/services": FakeResponse(text=MENU_PAGE),
            }
        )
        fetcher = HtmlFetcher(settings=pipeline_settings.http, session=session)
        search = FakeSearchClient(
            {
                query: SearchResponse(
                    provider="fake",
                    query=query,
                    candidates=[
                        SearchCandidate(
                            url="https://luxurynails.com",
                            title="Luxury Nails",
                            snippet="Nail salon",
                            source_provider=SearchProviderName.BRAVE,
                            rank=1,
                        )
                    ],
                )
            }
        )
        discovery = WebsiteDiscoveryEngine(
            search_client=search,
            fetcher=fetcher,
            classifier=DomainClassifier(pipeline_settings.classifier),
            settings=pipeline_settings.discovery,
            search_settings=pipeline_settings.search,
        )
        engine = PricingScrapeEngine(settings=pipeline_settings, discovery=discovery, fetcher=fetcher)
        stub = CompetitorStub(name=name, address=address, known_website="facebook.com/luxurynails")

        target = engine.resolve(stub)
        assert target.decision.should_scrape is True
        assert target.url == "https://luxurynails.com/services"
        assert target.extra_pages == ["https://luxurynails.com/nail-menu", "https://luxurynails.com"]

        results = engine.scrape_batch([stub])
        result = results[name]
        assert result.source is PriceSource.SCRAPED
        assert result.page_url == "https://luxurynails.com/services"
        assert result.gel == 35.0
        assert not any("facebook.com" in url for url in session.urls_called())

    def test_usable_known_website_skips_discovery(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        discovery = RaisingDiscovery()
        engine = _engine(pipeline_settings, fake_session, discovery=discovery)
        target = engine.resolve(
            CompetitorStub(name="Luxury Nails", address=ADDRESS, known_website="https://luxurynails.com")
        )
        assert target.decision.should_scrape is True
        assert discovery.calls == 0

    def test_discovery_error_keeps_original_reason(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        discovery = RaisingDiscovery()
        engine = _engine(pipeline_settings, fake_session, discovery=discovery)
        target = engine.resolve(
            CompetitorStub(name="Luxury Nails", address=ADDRESS, known_website="https://www.yelp.com/biz/luxury")
        )
        assert discovery.calls == 1
        assert target.decision.should_scrape is False
        assert target.decision.reason == reason_codes.BLOCKED_DOMAIN

    def test_failed_discovery_keeps_original_reason(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        discovery = CannedDiscovery(
            DiscoveredWebsite(
                homepage=None,
                services_page=None,
                menu_page=None,
                confidence=WebsiteConfidence.LOW,
                score=0,
                success=False,
                reason=reason_codes.NO_SEARCH_RESULTS,
            )
        )
        engine = _engine(pipeline_settings, fake_session, discovery=discovery)
        target = engine.resolve(CompetitorStub(name="Luxury Nails", address=ADDRESS))
        assert target.decision.reason == reason_codes.NO_URL
        assert target.discovered is discovery.discovered

    def test_low_discovery_score_is_not_scraped(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        discovery = CannedDiscovery(
            DiscoveredWebsite(
                homepage="https://luxurynails.com",
                services_page=None,
                menu_page=None,
                confidence=WebsiteConfidence.LOW,
                score=12,
                success=True,
            )
        )
        engine = _engine(pipeline_settings, fake_session, discovery=discovery)
        target = engine.resolve(CompetitorStub(name="Luxury Nails", address=ADDRESS))
        assert target.url == "https://luxurynails.com"
        assert target.decision.reason == reason_codes.LOW_CONFIDENCE_WEBSITE

    def test_disabled_discovery_is_not_called(
        self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession
    ) -> None:
        settings = dataclasses.replace(
            pipeline_settings,
            discovery=dataclasses.replace(pipeline_settings.discovery, enabled=False),
        )
        discovery = RaisingDiscovery()
        engine = _engine(settings, fake_session, discovery=discovery)
        target = engine.resolve(CompetitorStub(name="Luxury Nails", address=ADDRESS, known_website="#"))
        assert discovery.calls == 0
        assert target.decision.reason == reason_codes.NO_URL


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class TestScrapeBatch:
    def test_every_input_gets_one_result_in_order(self, pipeline_settings: PricingPipelineSettings) -> None:
        session = FakeSession({"https://glamournails.com": FakeResponse(text=MENU_PAGE)})
        engine = _engine(pipeline_settings, session)
        stubs = [
            CompetitorStub(name="Placeholder Nails", address=ADDRESS, known_website="#"),
            CompetitorStub(name="Glamour Nails", address=ADDRESS, known_website="https://glamournails.com", price_level=4),
            CompetitorStub(name="Social Nails", address=ADDRESS, known_website="https://instagram.com/socialnails"),
            CompetitorStub(name="Quiet Nails", address=ADDRESS, known_website="https://quietnails.com", price_level=1),
        ]

        results = engine.scrape_batch(stubs)

        assert list(results) == [stub.name for stub in stubs]
        assert results["Placeholder Nails"].source is PriceSource.SKIPPED
        assert results["Placeholder Nails"].reason == reason_codes.NO_URL
        assert results["Social Nails"].reason == reason_codes.BLOCKED_DOMAIN
        assert results["Glamour Nails"].source is PriceSource.SCRAPED
        assert results["Glamour Nails"].gel == 35.0
        assert results["Quiet Nails"].source is PriceSource.ESTIMATED
        assert results["Quiet Nails"].gel == 30.0
        assert not any("instagram.com" in url for url in session.urls_called())

    def test_empty_batch(self, pipeline_settings: PricingPipelineSettings, fake_session: FakeSession) -> None:
        assert _engine(pipeline_settings, fake_session).scrape_batch([]) == {}
