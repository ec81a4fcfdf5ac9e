"""
price_scout/schemas package marker.
"""

from price_scout.schemas.competitor_pricing import (
    CompetitorPricingRequest,
    CompetitorStubRequest,
    ExtractedServiceResponse,
    PriceResultResponse,
    TierEstimateResponse,
)

__all__ = [
    "CompetitorPricingRequest",
    "CompetitorStubRequest",
    "ExtractedServiceResponse",
    "PriceResultResponse",
    "TierEstimateResponse",
]
