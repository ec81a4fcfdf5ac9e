"""
price_scout/services package marker.
"""

from price_scout.services.competitor_pricing_service import (
    CompetitorPricingService,
    get_competitor_pricing_service,
)

__all__ = [
    "CompetitorPricingService",
    "get_competitor_pricing_service",
]
