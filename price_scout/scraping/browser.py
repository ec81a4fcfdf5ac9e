"""
Headless Chromium session for JavaScript-rendered salon pages.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from typing import Any

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from price_scout.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
)
BLOCKED_RESOURCE_TYPES = frozenset({"image", "media", "font"})
VIEWPORT = {"width": 1920, "height": 1080}

# (wait_until, share of the session timeout)
NAVIGATION_STRATEGIES = (
    ("domcontentloaded", 0.5),
    ("networkidle", 0.7),
    ("load", 0.85),
)


def _block_heavy_resources(route: Any) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


def _swap_scheme(url: str) -> str:
    if url.startswith("https://"):
        return "http://" + url[len("https://") :]
    if url.startswith("http://"):
        return "https://" + url[len("http://") :]
    return url


class BrowserSession:
    """
    Owns one Playwright browser; started on first use, released by `close()`.

    Playwright's sync objects are bound to the creating thread, so each
    scrape call opens its own session through a `with` block.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 30.0,
        user_agent: str | None = None,
        headless: bool = True,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent or random.choice(DESKTOP_USER_AGENTS)
        self.headless = headless
        self._playwright_factory = playwright_factory
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None

    @property
    def is_started(self) -> bool:
        return self._context is not None

    def __enter__(self) -> BrowserSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _ensure_started(self) -> Any:
        if self._context is not None:
            return self._context

        self._playwright = self._playwright_factory().start()
        self._browser = self._playwright.chromium.launch(headless=self.headless)
        self._context = self._browser.new_context(
            user_agent=self.user_agent,
            viewport=VIEWPORT,
            extra_http_headers={"Accept-Language": "en-US,en;q=0.9"},
        )
        self._context.route("**/*", _block_heavy_resources)
        log_event(logger, logging.INFO, "browser_started", headless=self.headless)
        return self._context

    def render(self, url: str, *, settle_ms: int = 0) -> str | None:
        """
        Navigate to `url` and return the rendered HTML, or None on failure.
        """

        context = self._ensure_started()
        page = context.new_page()
        try:
            if not self._navigate(page, url):
                return None
            if settle_ms > 0:
                page.wait_for_timeout(settle_ms)
            return page.content()
        except PlaywrightError as exc:
            log_event(logger, logging.WARNING, "browser_render_failed", url=url, error=str(exc))
            return None
        finally:
            page.close()

    def _navigate(self, page: Any, url: str) -> bool:
        target = url
        timeout_ms = self.timeout_seconds * 1000
        for wait_until, share in NAVIGATION_STRATEGIES:
            try:
                page.goto(target, wait_until=wait_until, timeout=timeout_ms * share)
                return True
            except PlaywrightTimeoutError:
                log_event(
                    logger,
                    logging.INFO,
                    "browser_navigation_timeout",
                    url=target,
                    wait_until=wait_until,
                )
            except PlaywrightError as exc:
                if "ERR_BLOCKED_BY_CLIENT" in str(exc) and target == url:
                    target = _swap_scheme(url)
                    continue
                log_event(logger, logging.WARNING, "browser_navigation_failed", url=target, error=str(exc))
                return False
        return False

    def close(self) -> None:
        for resource, closer in (
            (self._context, "close"),
            (self._browser, "close"),
            (self._playwright, "stop"),
        ):
            if resource is None:
                continue
            try:
                getattr(resource, closer)()
            except PlaywrightError as exc:
                log_event(logger, logging.WARNING, "browser_close_failed", error=str(exc))
        self._context = None
        self._browser = None
        self._playwright = None
