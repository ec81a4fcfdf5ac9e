"""
Tier-based price estimates used when nothing could be extracted.
"""

from __future__ import annotations

from price_scout.domain.competitor_pricing import TierEstimate

DEFAULT_PRICE_LEVEL = 2

PRICE_TIERS: dict[int, TierEstimate] = {
    1: TierEstimate(gel=30.0, pedicure=35.0, acrylic=45.0),
    2: TierEstimate(gel=40.0, pedicure=45.0, acrylic=55.0),
    3: TierEstimate(gel=50.0, pedicure=60.0, acrylic=70.0),
    4: TierEstimate(gel=65.0, pedicure=80.0, acrylic=90.0),
}


def estimate_prices(price_level: int | None) -> TierEstimate:
    """
    Fixed estimate for a 1-4 price level; anything else uses the mid-low tier.
    """

    if price_level is None or price_level not in PRICE_TIERS:
        return PRICE_TIERS[DEFAULT_PRICE_LEVEL]
    return PRICE_TIERS[price_level]


def parse_price_level(value: str | int | None) -> int | None:
    """
    Accept 1-4 or a "$".."$$$$" marker; return None for anything else.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value in PRICE_TIERS else None

    stripped = value.strip()
    if stripped and set(stripped) == {"$"}:
        level = len(stripped)
    elif stripped.isdigit():
        level = int(stripped)
    else:
        return None
    return level if level in PRICE_TIERS else None
