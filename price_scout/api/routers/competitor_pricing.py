"""
price_scout/api/routers/competitor_pricing.py

Competitor pricing endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from price_scout.schemas.competitor_pricing import (
    CompetitorPricingRequest,
    PriceResultResponse,
    TierEstimateResponse,
)
from price_scout.scraping.estimator import DEFAULT_PRICE_LEVEL, PRICE_TIERS
from price_scout.services.competitor_pricing_service import (
    CompetitorPricingService,
    get_competitor_pricing_service,
)

router = APIRouter(tags=["competitor-pricing"])


@router.post("/competitor-prices", response_model=list[PriceResultResponse])
def price_competitors(
    payload: CompetitorPricingRequest,
    pricing_service: CompetitorPricingService = Depends(get_competitor_pricing_service),
) -> list[PriceResultResponse]:
    """
    Discover websites and extract prices for a batch of nearby competitors.
    """

    stubs = [competitor.to_domain() for competitor in payload.competitors]
    try:
        results = pricing_service.price_competitors(stubs)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return [PriceResultResponse.from_domain(name, result) for name, result in results.items()]


@router.get("/competitor-prices/estimate", response_model=TierEstimateResponse)
def estimate_competitor_prices(
    price_level: int | None = Query(default=None, description="Price level 1-4; defaults to 2"),
    pricing_service: CompetitorPricingService = Depends(get_competitor_pricing_service),
) -> TierEstimateResponse:
    """
    Tier-based price estimate for a coarse price level.
    """

    estimate = pricing_service.estimate(price_level)
    level = price_level if price_level in PRICE_TIERS else DEFAULT_PRICE_LEVEL
    return TierEstimateResponse(
        price_level=level,
        gel=estimate.gel,
        pedicure=estimate.pedicure,
        acrylic=estimate.acrylic,
    )
