"""
price_scout/api/routers package marker.
"""

from price_scout.api.routers.competitor_pricing import router as competitor_pricing_router

__all__ = ["competitor_pricing_router"]
