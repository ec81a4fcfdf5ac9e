"""
price_scout/main.py

FastAPI application factory.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from price_scout.config import get_app_settings
from price_scout.scraping.config import get_pricing_pipeline_settings

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = get_app_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _warn_on_missing_search_keys() -> None:
    """
    Log configuration gaps that degrade discovery without stopping startup.
    """

    settings = get_pricing_pipeline_settings()
    search = settings.search
    if "brave" in search.providers and not search.brave_api_keys:
        logger.warning("Brave search enabled but no BRAVE_SEARCH_API_KEY configured; provider will be skipped.")
    if "bing" in search.providers and not search.bing_api_keys:
        logger.warning("Bing search enabled but no BING_SEARCH_API_KEY configured; provider will be skipped.")
    if settings.scrape.browser_enabled:
        logger.info("Browser rendering enabled; Chromium must be installed via `playwright install chromium`.")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    _warn_on_missing_search_keys()

    application = FastAPI(
        title=get_app_settings().api_title,
        version="1.0.0",
    )

    from price_scout.api.routers import competitor_pricing_router

    application.include_router(competitor_pricing_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
