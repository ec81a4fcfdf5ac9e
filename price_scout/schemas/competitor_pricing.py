"""
price_scout/schemas/competitor_pricing.py

Request and response schemas for competitor pricing operations.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from price_scout.domain.competitor_pricing import CompetitorStub, ExtractedService, PriceResult


class CompetitorStubRequest(BaseModel):
    """
    One competitor to price.
    """

    name: str = Field(..., min_length=1)
    address: str = ""
    phone: str | None = None
    website: str | None = None
    price_level: int | None = Field(default=None, ge=1, le=4)

    def to_domain(self) -> CompetitorStub:
        return CompetitorStub(
            name=self.name.strip(),
            address=self.address.strip(),
            phone=self.phone,
            known_website=self.website,
            price_level=self.price_level,
        )


class CompetitorPricingRequest(BaseModel):
    competitors: list[CompetitorStubRequest] = Field(..., min_length=1)


class ExtractedServiceResponse(BaseModel):
    service_name: str
    service_type: str
    price: float = Field(..., ge=0)
    confidence: float = Field(..., ge=0, le=1)
    source: str

    @classmethod
    def from_domain(cls, service: ExtractedService) -> ExtractedServiceResponse:
        return cls(
            service_name=service.service_name,
            service_type=service.service_type.value,
            price=service.price,
            confidence=service.confidence,
            source=service.source,
        )


class PriceResultResponse(BaseModel):
    """
    API response model for one competitor's prices.
    """

    competitor: str
    source: str
    success: bool
    confidence: float = Field(..., ge=0, le=1)
    gel: float | None = None
    pedicure: float | None = None
    acrylic: float | None = None
    dip: float | None = None
    manicure: float | None = None
    reason: str | None = None
    page_url: str | None = None
    services: list[ExtractedServiceResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, competitor: str, result: PriceResult) -> PriceResultResponse:
        return cls(
            competitor=competitor,
            source=result.source.value,
            success=result.success,
            confidence=result.confidence,
            gel=result.gel,
            pedicure=result.pedicure,
            acrylic=result.acrylic,
            dip=result.dip,
            manicure=result.manicure,
            reason=result.reason,
            page_url=result.page_url,
            services=[ExtractedServiceResponse.from_domain(service) for service in result.services],
        )


class TierEstimateResponse(BaseModel):
    price_level: int
    gel: float
    pedicure: float
    acrylic: float
