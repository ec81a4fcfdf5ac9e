from price_scout.scraping.scrapers.browser_scraper import BrowserPriceScraper, find_booking_links
from price_scout.scraping.scrapers.static_scraper import StaticPriceScraper

__all__ = ["BrowserPriceScraper", "StaticPriceScraper", "find_booking_links"]
