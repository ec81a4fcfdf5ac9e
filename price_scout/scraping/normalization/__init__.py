from price_scout.scraping.normalization.price_normalizer import PriceNormalizer, representative_price

__all__ = ["PriceNormalizer", "representative_price"]
