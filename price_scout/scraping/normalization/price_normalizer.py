"""
Collapse extracted services into one representative price per category.
"""

from __future__ import annotations

import statistics
from collections import defaultdict
from collections.abc import Iterable, Sequence

from price_scout.domain.competitor_pricing import (
    TRACKED_CATEGORIES,
    ExtractedService,
    PriceResult,
    PriceSource,
    ServiceCategory,
)
from price_scout.scraping.config.models import ExtractionSettings


def representative_price(
    prices: Iterable[float],
    *,
    min_price: float = 10.0,
    max_price: float = 300.0,
) -> float | None:
    """
    Median of the in-range prices, rounded to cents; None when none qualify.

    Out-of-range values are dropped before the median is taken.
    """

    valid = [price for price in prices if min_price <= price <= max_price]
    if not valid:
        return None
    return round(float(statistics.median(valid)), 2)


class PriceNormalizer:
    """
    Turns a list of extracted services into category medians and a PriceResult.
    """

    def __init__(
        self,
        settings: ExtractionSettings | None = None,
        tracked_categories: Sequence[ServiceCategory] = TRACKED_CATEGORIES,
    ) -> None:
        self.settings = settings or ExtractionSettings()
        self.tracked_categories = tuple(tracked_categories)

    def category_prices(self, services: Iterable[ExtractedService]) -> dict[ServiceCategory, float]:
        grouped: dict[ServiceCategory, list[float]] = defaultdict(list)
        for service in services:
            if service.service_type is ServiceCategory.OTHER:
                continue
            grouped[service.service_type].append(service.price)

        medians: dict[ServiceCategory, float] = {}
        for category, prices in grouped.items():
            median = representative_price(
                prices,
                min_price=self.settings.min_price,
                max_price=self.settings.max_price,
            )
            if median is not None:
                medians[category] = median
        return medians

    def confidence(self, category_prices: dict[ServiceCategory, float]) -> float:
        if not self.tracked_categories:
            return 0.0
        found = sum(1 for category in self.tracked_categories if category in category_prices)
        return round(found / len(self.tracked_categories), 4)

    def to_price_result(
        self,
        services: Sequence[ExtractedService],
        *,
        page_url: str | None = None,
    ) -> PriceResult | None:
        """
        Scraped PriceResult, or None when no category received a price.
        """

        prices = self.category_prices(services)
        if not prices:
            return None
        return PriceResult(
            source=PriceSource.SCRAPED,
            success=True,
            confidence=self.confidence(prices),
            gel=prices.get(ServiceCategory.GEL),
            pedicure=prices.get(ServiceCategory.PEDICURE),
            acrylic=prices.get(ServiceCategory.ACRYLIC),
            dip=prices.get(ServiceCategory.DIP),
            manicure=prices.get(ServiceCategory.MANICURE),
            page_url=page_url,
            services=tuple(services),
        )
