"""
Smart scrape orchestration: decide, discover, scrape, fall back.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass

import requests

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import (
    CompetitorStub,
    DiscoveredWebsite,
    PriceResult,
    ScrapeDecision,
)
from price_scout.scraping.base import PriceScraperBase
from price_scout.scraping.browser import BrowserSession
from price_scout.scraping.classifier import DomainClassifier, is_blocked_domain
from price_scout.scraping.config.models import PricingPipelineSettings
from price_scout.scraping.discovery import WebsiteDiscoveryEngine
from price_scout.scraping.estimator import estimate_prices
from price_scout.scraping.fetcher import HtmlFetcher, normalize_url
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.normalization import PriceNormalizer
from price_scout.scraping.parsing import PriceExtractor
from price_scout.scraping.registry import ScraperRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedTarget:
    """
    Where (and whether) to scrape one competitor.
    """

    stub: CompetitorStub
    url: str | None
    decision: ScrapeDecision
    score: int | None = None
    discovered: DiscoveredWebsite | None = None

    @property
    def extra_pages(self) -> list[str]:
        if self.discovered is None:
            return []
        pages = [self.discovered.menu_page, self.discovered.homepage]
        return [page for page in pages if page and page != self.url]


class PricingScrapeEngine:
    """
    Orchestrates website resolution, price extraction and estimate fallback.

    `scrape_one` and `scrape_batch` never raise for per-competitor problems:
    every input gets exactly one PriceResult.
    """

    def __init__(
        self,
        *,
        settings: PricingPipelineSettings,
        discovery: WebsiteDiscoveryEngine | None = None,
        fetcher: HtmlFetcher | None = None,
        extractor: PriceExtractor | None = None,
        normalizer: PriceNormalizer | None = None,
        registry: ScraperRegistry | None = None,
        session: requests.Session | None = None,
        browser_factory: Callable[[], BrowserSession] | None = None,
    ) -> None:
        self._settings = settings
        self._discovery = discovery
        self._fetcher = fetcher or HtmlFetcher(settings=settings.http, session=session)
        self._extractor = extractor or PriceExtractor(settings.extraction)
        self._normalizer = normalizer or PriceNormalizer(settings.extraction)
        self._registry = registry or ScraperRegistry()
        self._browser_factory = browser_factory or self._default_browser_factory

    def _default_browser_factory(self) -> BrowserSession:
        return BrowserSession(
            timeout_seconds=self._settings.scrape.browser_timeout_seconds,
            user_agent=self._settings.http.user_agent,
        )

    def decide(self, url: str | None, discovery_score: int | None = None) -> ScrapeDecision:
        if url is None or not url.strip() or url.strip() == "#":
            return ScrapeDecision(should_scrape=False, reason=reason_codes.NO_URL)
        if normalize_url(url) is None:
            return ScrapeDecision(should_scrape=False, reason=reason_codes.INVALID_URL)
        if is_blocked_domain(url):
            return ScrapeDecision(should_scrape=False, reason=reason_codes.BLOCKED_DOMAIN)
        if discovery_score is not None and discovery_score < self._settings.scrape.min_discovery_score:
            return ScrapeDecision(should_scrape=False, reason=reason_codes.LOW_CONFIDENCE_WEBSITE)
        return ScrapeDecision(should_scrape=True, reason=reason_codes.SCRAPE)

    def resolve(self, stub: CompetitorStub) -> ResolvedTarget:
        """
        Use the known website when usable, otherwise try discovery.
        """

        decision = self.decide(stub.known_website)
        if decision.should_scrape:
            return ResolvedTarget(stub=stub, url=stub.known_website, decision=decision)
        if self._discovery is None or not self._settings.discovery.enabled:
            return ResolvedTarget(stub=stub, url=stub.known_website, decision=decision)

        try:
            discovered = self._discovery.discover(stub.name, stub.address, stub.phone)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "competitor_discovery_failed",
                competitor=stub.name,
                error=str(exc),
            )
            return ResolvedTarget(stub=stub, url=stub.known_website, decision=decision)

        if not discovered.success or discovered.scrape_target is None:
            return ResolvedTarget(stub=stub, url=stub.known_website, decision=decision, discovered=discovered)

        url = discovered.scrape_target
        return ResolvedTarget(
            stub=stub,
            url=url,
            decision=self.decide(url, discovered.score),
            score=discovered.score,
            discovered=discovered,
        )

    def scrape_one(
        self,
        name: str,
        url: str | None,
        score: int | None = None,
        price_level: int | None = None,
        *,
        extra_pages: Sequence[str] = (),
    ) -> PriceResult:
        decision = self.decide(url, score)
        if not decision.should_scrape:
            log_event(logger, logging.INFO, "competitor_skipped", competitor=name, url=url, reason=decision.reason)
            return PriceResult.skipped(decision.reason)

        target = normalize_url(url)
        if target is None:
            return PriceResult.skipped(reason_codes.INVALID_URL)
        try:
            result = self._scrape_with(self._static_scraper(), name, target, extra_pages)
            if result is None and self._settings.scrape.browser_enabled:
                result = self._scrape_with(self._browser_scraper(), name, target, extra_pages)
        except Exception as exc:
            log_event(
                logger,
                logging.ERROR,
                "competitor_scrape_failed",
                competitor=name,
                url=target,
                error=str(exc),
            )
            return PriceResult.estimated(
                estimate_prices(price_level),
                reason=reason_codes.SCRAPE_ERROR,
                page_url=target,
            )

        if result is None:
            log_event(
                logger,
                logging.INFO,
                "competitor_prices_estimated",
                competitor=name,
                url=target,
                reason=reason_codes.NO_EXTRACTABLE_CONTENT,
            )
            return PriceResult.estimated(
                estimate_prices(price_level),
                reason=reason_codes.NO_EXTRACTABLE_CONTENT,
                page_url=target,
            )

        log_event(
            logger,
            logging.INFO,
            "competitor_scrape_completed",
            competitor=name,
            page_url=result.page_url,
            prices=result.category_prices(),
            confidence=result.confidence,
        )
        return result

    def scrape_batch(self, stubs: Sequence[CompetitorStub]) -> dict[str, PriceResult]:
        """
        One PriceResult per competitor name, scraped with bounded concurrency.
        """

        targets = [self.resolve(stub) for stub in stubs]
        results: dict[str, PriceResult] = {}
        scrapable: list[ResolvedTarget] = []
        for target in targets:
            if target.decision.should_scrape:
                scrapable.append(target)
            else:
                results[target.stub.name] = PriceResult.skipped(target.decision.reason)

        log_event(
            logger,
            logging.INFO,
            "scrape_batch_started",
            competitors=len(targets),
            scrapable=len(scrapable),
            skipped=len(targets) - len(scrapable),
        )

        if scrapable:
            with ThreadPoolExecutor(max_workers=self._settings.scrape.concurrency) as executor:
                futures = {
                    executor.submit(
                        self.scrape_one,
                        target.stub.name,
                        target.url,
                        target.score,
                        target.stub.price_level,
                        extra_pages=target.extra_pages,
                    ): target
                    for target in scrapable
                }
                for future in as_completed(futures):
                    target = futures[future]
                    try:
                        results[target.stub.name] = future.result()
                    except Exception as exc:
                        log_event(
                            logger,
                            logging.ERROR,
                            "competitor_worker_failed",
                            competitor=target.stub.name,
                            error=str(exc),
                        )
                        results[target.stub.name] = PriceResult.estimated(
                            estimate_prices(target.stub.price_level),
                            reason=reason_codes.SCRAPE_ERROR,
                            page_url=target.url,
                        )

        return {stub.name: results[stub.name] for stub in stubs}

    def _scrape_with(
        self,
        scraper: PriceScraperBase,
        name: str,
        url: str,
        extra_pages: Sequence[str],
    ) -> PriceResult | None:
        outcome = scraper.scrape(url, competitor=name, extra_pages=extra_pages)
        return self._normalizer.to_price_result(outcome.services, page_url=outcome.page_url or url)

    def _static_scraper(self) -> PriceScraperBase:
        return self._create_scraper("static")

    def _browser_scraper(self) -> PriceScraperBase:
        return self._create_scraper("browser")

    def _create_scraper(self, scraper_type: str) -> PriceScraperBase:
        return self._registry.create_scraper(
            scraper_type,
            settings=self._settings,
            extractor=self._extractor,
            fetcher=self._fetcher,
            browser_factory=self._browser_factory,
        )
