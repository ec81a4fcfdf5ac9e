"""
HTML parsing for service menus and price lists.
"""

from price_scout.scraping.parsing.price_extractor import PriceExtractor
from price_scout.scraping.parsing.price_patterns import (
    PriceMatch,
    categorize_service,
    find_price,
    has_domain_keyword,
)
from price_scout.scraping.parsing.strategies import (
    DEFAULT_STRATEGIES,
    ExtractionStrategy,
    LeafElementStrategy,
    LinePairStrategy,
    ListItemStrategy,
    ParsedPage,
    TableRowStrategy,
)

__all__ = [
    "DEFAULT_STRATEGIES",
    "ExtractionStrategy",
    "LeafElementStrategy",
    "LinePairStrategy",
    "ListItemStrategy",
    "ParsedPage",
    "PriceExtractor",
    "PriceMatch",
    "TableRowStrategy",
    "categorize_service",
    "find_price",
    "has_domain_keyword",
]
