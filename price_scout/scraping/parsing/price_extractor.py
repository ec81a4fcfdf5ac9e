"""
Service/price extraction from heterogeneous salon pages.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from price_scout.domain.competitor_pricing import ExtractedService, ServiceCategory
from price_scout.scraping.config.models import ExtractionSettings
from price_scout.scraping.logging_utils import log_event
from price_scout.scraping.parsing.strategies import (
    DEFAULT_STRATEGIES,
    ExtractionStrategy,
    ParsedPage,
)

logger = logging.getLogger(__name__)


class PriceExtractor:
    """
    Runs extraction strategies in order until enough services are found.

    Results from every strategy that ran are combined; a (category, price)
    pair found by an earlier strategy is not repeated by a later one.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        strategies: Sequence[ExtractionStrategy] | None = None,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.strategies = tuple(strategies) if strategies is not None else DEFAULT_STRATEGIES

    def extract(self, html: str) -> list[ExtractedService]:
        if not html or not html.strip():
            return []
        return self._run(ParsedPage.from_html(html))

    def extract_from_text(self, text: str) -> list[ExtractedService]:
        """
        Extract from already-rendered visible text (line based strategies only).
        """

        if not text or not text.strip():
            return []
        return self._run(ParsedPage.from_text(text))

    def _run(self, page: ParsedPage) -> list[ExtractedService]:
        services: list[ExtractedService] = []
        seen: set[tuple[str, float, str]] = set()

        for strategy in self.strategies:
            found = 0
            for service in strategy.extract(page, self.settings):
                key = self.dedupe_key(service)
                if key in seen:
                    continue
                seen.add(key)
                services.append(service)
                found += 1

            log_event(logger, logging.DEBUG, "extraction_strategy_ran", strategy=strategy.source, found=found)
            if self.has_enough_signal(services):
                break
        return services

    def has_enough_signal(self, services: Sequence[ExtractedService]) -> bool:
        categorized = [service for service in services if service.service_type is not ServiceCategory.OTHER]
        return len(categorized) >= self.settings.min_signal_services

    @staticmethod
    def dedupe_key(service: ExtractedService) -> tuple[str, float, str]:
        # Uncategorized services keep their name so distinct extras survive.
        name = service.service_name.lower() if service.service_type is ServiceCategory.OTHER else ""
        return (service.service_type.value, service.price, name)
