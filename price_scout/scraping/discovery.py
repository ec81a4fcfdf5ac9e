"""
Website discovery: find the real website of a business from name + address.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import (
    CompetitorStub,
    DiscoveredWebsite,
    SearchCandidate,
    WebsiteConfidence,
)
from price_scout.scraping.classifier import (
    DomainClassifier,
    extract_domain,
    is_blocked_domain,
    significant_name_parts,
)
from price_scout.scraping.config.models import DiscoverySettings, SearchSettings
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.links import (
    contains_directory_patterns,
    extract_service_links,
    is_likely_js_only_page,
    select_best_service_page,
    select_menu_page,
)
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.retry import sleep_with_jitter
from price_scout.scraping.search.base import SearchClient

logger = logging.getLogger(__name__)

ERROR_BACKOFF_SECONDS = 2.0
BATCH_DELAY_SECONDS = 2.0

# Errors that later query variants cannot fix.
STOP_SEARCH_ERRORS = frozenset({reason_codes.RATE_LIMITED, reason_codes.API_KEY_MISSING})


def city_from_address(address: str) -> str:
    """
    Second-to-last comma-separated part: "1 Main St, Springfield, IL" -> "Springfield".
    """

    parts = [part.strip() for part in address.split(",")]
    if len(parts) < 2:
        return ""
    return parts[-2]


def build_queries(name: str, address: str, phone: str | None = None) -> list[str]:
    """
    Search query variants, most specific first.
    """

    name = name.strip()
    address = address.strip()
    city = city_from_address(address)
    queries = [
        f"{name} {address} official website",
        f"{name} {city} nail salon",
        f"{name} {city} services",
        f"{name} manicure pedicure pricing",
    ]
    if phone and phone.strip():
        queries.append(f"{name} {phone.strip()}")
    return list(dict.fromkeys(" ".join(query.split()) for query in queries))


class WebsiteDiscoveryEngine:
    """
    Searches for a business and returns the first candidate that looks real.
    """

    def __init__(
        self,
        *,
        search_client: SearchClient,
        fetcher: HtmlFetcher,
        classifier: DomainClassifier,
        settings: DiscoverySettings | None = None,
        search_settings: SearchSettings | None = None,
    ) -> None:
        self._search_client = search_client
        self._fetcher = fetcher
        self._classifier = classifier
        self._settings = settings or DiscoverySettings()
        self._search_settings = search_settings or SearchSettings()

    def discover(self, name: str, address: str, phone: str | None = None) -> DiscoveredWebsite:
        candidates, query, saw_results = self._search_candidates(name=name, address=address, phone=phone)
        if not candidates:
            reason = reason_codes.ALL_CANDIDATES_REJECTED if saw_results else reason_codes.NO_SEARCH_RESULTS
            log_event(logger, logging.INFO, "discovery_failed", business=name, reason=reason)
            return self._failure(reason=reason, query=query)

        for candidate in self._rank_candidates(candidates, name)[: self._settings.top_k]:
            discovered = self._evaluate_candidate(candidate, business=name, query=query)
            if discovered is not None:
                return discovered

        log_event(
            logger,
            logging.INFO,
            "discovery_failed",
            business=name,
            reason=reason_codes.ALL_CANDIDATES_REJECTED,
            query=query,
        )
        return self._failure(reason=reason_codes.ALL_CANDIDATES_REJECTED, query=query)

    def discover_batch(self, stubs: Sequence[CompetitorStub]) -> dict[str, DiscoveredWebsite]:
        """
        Discover websites one business at a time with a pause in between.
        """

        results: dict[str, DiscoveredWebsite] = {}
        for index, stub in enumerate(stubs):
            if index > 0:
                sleep_with_jitter(BATCH_DELAY_SECONDS, 0.5)
            results[stub.name] = self.discover(stub.name, stub.address, stub.phone)
        return results

    def _search_candidates(
        self,
        *,
        name: str,
        address: str,
        phone: str | None,
    ) -> tuple[list[SearchCandidate], str | None, bool]:
        """
        Run query variants until one yields usable candidates.

        Returns (usable candidates, query that produced them, whether any
        query returned results at all).
        """

        last_query: str | None = None
        saw_results = False
        for index, query in enumerate(build_queries(name, address, phone)):
            if index > 0:
                sleep_with_jitter(self._search_settings.query_delay_seconds)
            last_query = query
            response = self._search_client.search(query, self._search_settings.result_count)

            if response.error in STOP_SEARCH_ERRORS:
                log_event(
                    logger,
                    logging.WARNING,
                    "discovery_search_stopped",
                    business=name,
                    query=query,
                    error=response.error,
                )
                break
            if not response.ok:
                sleep_with_jitter(ERROR_BACKOFF_SECONDS, 0.25)
                continue

            # Hits dropped by the provider blocklist still count as results.
            saw_results = saw_results or bool(response.candidates) or response.blocked > 0
            usable = [candidate for candidate in response.candidates if not is_blocked_domain(candidate.url)]
            if usable:
                log_event(
                    logger,
                    logging.INFO,
                    "discovery_candidates_found",
                    business=name,
                    query=query,
                    candidates=len(usable),
                )
                return usable, query, True
        return [], last_query, saw_results

    @staticmethod
    def _rank_candidates(candidates: list[SearchCandidate], name: str) -> list[SearchCandidate]:
        """
        Stable sort that moves domains containing a business-name word forward.
        """

        name_parts = significant_name_parts(name)
        if not name_parts:
            return list(candidates)

        def matches(candidate: SearchCandidate) -> bool:
            domain = extract_domain(candidate.url) or ""
            return any(part in domain for part in name_parts)

        return sorted(candidates, key=lambda candidate: not matches(candidate))

    def _evaluate_candidate(
        self,
        candidate: SearchCandidate,
        *,
        business: str,
        query: str | None,
    ) -> DiscoveredWebsite | None:
        html = self._fetcher.fetch(candidate.url)
        if html is None:
            log_event(logger, logging.INFO, "discovery_candidate_unreachable", business=business, url=candidate.url)
            return None

        verdict = self._classifier.classify(candidate.url, html)
        if not verdict.is_real:
            log_event(
                logger,
                logging.INFO,
                "discovery_candidate_rejected",
                business=business,
                url=candidate.url,
                score=verdict.score,
                reason=verdict.reason,
            )
            return None
        if contains_directory_patterns(html):
            log_event(
                logger,
                logging.INFO,
                "discovery_candidate_rejected",
                business=business,
                url=candidate.url,
                score=verdict.score,
                reason="directory_patterns",
            )
            return None

        links = extract_service_links(html, candidate.url)
        services_page = select_best_service_page(links)
        menu_page = select_menu_page(links, exclude=services_page)
        js_rendered = is_likely_js_only_page(html, self._settings.js_only_min_chars)
        confidence = self.confidence_for(verdict.score)
        if js_rendered:
            confidence = confidence.lowered()

        log_event(
            logger,
            logging.INFO,
            "discovery_succeeded",
            business=business,
            url=candidate.url,
            provider=candidate.source_provider.value,
            score=verdict.score,
            confidence=confidence.value,
            services_page=services_page,
            js_rendered=js_rendered,
        )
        return DiscoveredWebsite(
            homepage=candidate.url,
            services_page=services_page,
            menu_page=menu_page,
            confidence=confidence,
            score=verdict.score,
            success=True,
            search_query=query,
            js_rendered=js_rendered,
        )

    def confidence_for(self, score: int) -> WebsiteConfidence:
        if score >= self._settings.high_confidence_score:
            return WebsiteConfidence.HIGH
        if score >= self._settings.medium_confidence_score:
            return WebsiteConfidence.MEDIUM
        return WebsiteConfidence.LOW

    @staticmethod
    def _failure(*, reason: str, query: str | None) -> DiscoveredWebsite:
        return DiscoveredWebsite(
            homepage=None,
            services_page=None,
            menu_page=None,
            confidence=WebsiteConfidence.LOW,
            score=0,
            success=False,
            reason=reason,
            search_query=query,
        )
