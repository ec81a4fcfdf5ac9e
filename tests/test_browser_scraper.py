"""
tests/test_browser_scraper.py

Unit tests for the Playwright-backed browser session and scraper, using
in-memory stand-ins for the Playwright object graph.

Coverage
--------
- Browser starts lazily and releases every resource on close
- Heavy resource types are aborted
- Navigation falls back through wait strategies and swaps scheme on client blocks
- Booking links are detected from label or href
- Booking pages are tried before the regular page plan
"""

from __future__ import annotations

import pytest
from fakes import FakeSession
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from price_scout.domain.competitor_pricing import ServiceCategory
from price_scout.scraping.browser import BrowserSession, _block_heavy_resources
from price_scout.scraping.config.models import PricingPipelineSettings
from price_scout.scraping.fetcher import HtmlFetcher
from price_scout.scraping.parsing import PriceExtractor
from price_scout.scraping.scrapers import BrowserPriceScraper, find_booking_links

MENU_PAGE = """
<table>
  <tr><td>Gel Manicure</td><td>$36</td></tr>
  <tr><td>Deluxe Pedicure</td><td>$52</td></tr>
</table>
"""


class FakePage:
    def __init__(self, owner: FakeContext) -> None:
        self.owner = owner
        self.closed = False

    def goto(self, url: str, *, wait_until: str, timeout: float) -> None:
        self.owner.gotos.append((url, wait_until))
        if self.owner.goto_errors:
            raise self.owner.goto_errors.pop(0)

    def wait_for_timeout(self, ms: int) -> None:
        self.owner.waits.append(ms)

    def content(self) -> str:
        return self.owner.html

    def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, html: str, goto_errors: list[Exception]) -> None:
        self.html = html
        self.goto_errors = goto_errors
        self.gotos: list[tuple[str, str]] = []
        self.waits: list[int] = []
        self.pages: list[FakePage] = []
        self.routes: list[str] = []
        self.closed = False

    def route(self, pattern: str, handler) -> None:
        self.routes.append(pattern)

    def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page

    def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, context: FakeContext) -> None:
        self.context = context
        self.context_kwargs: dict = {}
        self.closed = False

    def new_context(self, **kwargs) -> FakeContext:
        self.context_kwargs = kwargs
        return self.context

    def close(self) -> None:
        self.closed = True


class FakeChromium:
    def __init__(self, browser: FakeBrowser) -> None:
        self.browser = browser
        self.launches = 0

    def launch(self, *, headless: bool) -> FakeBrowser:
        self.launches += 1
        return self.browser


class FakePlaywright:
    def __init__(self, html: str = "<html></html>", goto_errors: list[Exception] | None = None) -> None:
        self.context = FakeContext(html, list(goto_errors or []))
        self.browser = FakeBrowser(self.context)
        self.chromium = FakeChromium(self.browser)
        self.stopped = False

    def start(self) -> FakePlaywright:
        return self

    def stop(self) -> None:
        self.stopped = True


class FakeRoute:
    def __init__(self, resource_type: str) -> None:
        self.request = type("Request", (), {"resource_type": resource_type})()
        self.action: str | None = None

    def abort(self) -> None:
        self.action = "abort"

    def continue_(self) -> None:
        self.action = "continue"


class FakeRenderSession:
    """
    Context-managed stand-in for BrowserSession keyed by URL.
    """

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = pages
        self.renders: list[tuple[str, int]] = []
        self.closed = False

    def __enter__(self) -> FakeRenderSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.closed = True

    def render(self, url: str, *, settle_ms: int = 0) -> str | None:
        self.renders.append((url, settle_ms))
        return self.pages.get(url)


def _scraper(settings: PricingPipelineSettings, session: FakeRenderSession | None) -> BrowserPriceScraper:
    return BrowserPriceScraper(
        settings=settings,
        extractor=PriceExtractor(settings.extraction),
        fetcher=HtmlFetcher(settings=settings.http, session=FakeSession()),
        browser_factory=(lambda: session) if session is not None else None,
    )


# ---------------------------------------------------------------------------
# BrowserSession
# ---------------------------------------------------------------------------


class TestBrowserSession:
    def test_starts_lazily_and_closes_everything(self) -> None:
        playwright = FakePlaywright(html="<html><body>rendered</body></html>")
        session = BrowserSession(user_agent="tests", playwright_factory=lambda: playwright)
        assert session.is_started is False

        with session:
            assert session.render("https://luxurynails.com") == "<html><body>rendered</body></html>"
            assert session.is_started is True
            session.render("https://luxurynails.com/services")

        assert playwright.chromium.launches == 1
        assert playwright.browser.context_kwargs["user_agent"] == "tests"
        assert playwright.context.routes == ["**/*"]
        assert all(page.closed for page in playwright.context.pages)
        assert playwright.context.closed and playwright.browser.closed and playwright.stopped
        assert session.is_started is False

    def test_settle_time_is_waited(self) -> None:
        playwright = FakePlaywright()
        session = BrowserSession(playwright_factory=lambda: playwright)
        session.render("https://luxurynails.com", settle_ms=8000)
        assert playwright.context.waits == [8000]

    def test_navigation_falls_back_on_timeout(self) -> None:
        playwright = FakePlaywright(html="ok", goto_errors=[PlaywrightTimeoutError("slow")])
        session = BrowserSession(playwright_factory=lambda: playwright)
        assert session.render("https://luxurynails.com") == "ok"
        assert playwright.context.gotos == [
            ("https://luxurynails.com", "domcontentloaded"),
            ("https://luxurynails.com", "networkidle"),
        ]

    def test_client_block_swaps_scheme(self) -> None:
        playwright = FakePlaywright(
            html="ok",
            goto_errors=[PlaywrightError("net::ERR_BLOCKED_BY_CLIENT at https://luxurynails.com")],
        )
        session = BrowserSession(playwright_factory=lambda: playwright)
        assert session.render("https://luxurynails.com") == "ok"
        assert playwright.context.gotos[-1][0] == "http://luxurynails.com"

    def test_every_strategy_failing_returns_none(self) -> None:
        playwright = FakePlaywright(goto_errors=[PlaywrightTimeoutError("slow") for _ in range(3)])
        session = BrowserSession(playwright_factory=lambda: playwright)
        assert session.render("https://luxurynails.com") is None
        assert playwright.context.pages[0].closed is True

    def test_heavy_resources_are_blocked(self) -> None:
        image, document = FakeRoute("image"), FakeRoute("document")
        _block_heavy_resources(image)
        _block_heavy_resources(document)
        assert image.action == "abort"
        assert document.action == "continue"


# ---------------------------------------------------------------------------
# Booking links
# ---------------------------------------------------------------------------


class TestFindBookingLinks:
    def test_label_or_href_match(self) -> None:
        html = """
        <a href="/about">About</a>
        <a href="https://www.vagaro.com/luxurynails">Book Now</a>
        <a href="/appointments">Visit us</a>
        <a href="tel:5550100">Book by phone</a>
        <a href="https://luxurynails.booksy.com/schedule">Schedule online</a>
        """
        assert find_booking_links(html, "https://luxurynails.com") == [
            "https://www.vagaro.com/luxurynails",
            "https://luxurynails.com/appointments",
        ]

    def test_limit(self) -> None:
        html = '<a href="/appointment">Book</a><a href="/schedule">Schedule</a>'
        assert find_booking_links(html, "https://luxurynails.com", limit=1) == ["https://luxurynails.com/appointment"]


# ---------------------------------------------------------------------------
# BrowserPriceScraper
# ---------------------------------------------------------------------------


class TestBrowserPriceScraper:
    def test_booking_page_is_tried_first(self, pipeline_settings: PricingPipelineSettings) -> None:
        booking_url = "https://www.vagaro.com/luxurynails/services"
        session = FakeRenderSession(
            {
                "https://luxurynails.com": f'<a href="{booking_url}">Book Now</a>',
                booking_url: MENU_PAGE,
            }
        )

        outcome = _scraper(pipeline_settings, session).scrape("https://luxurynails.com", competitor="Luxury Nails")

        assert outcome.page_url == booking_url
        assert {service.service_type for service in outcome.services} == {
            ServiceCategory.GEL,
            ServiceCategory.PEDICURE,
        }
        assert session.renders == [("https://luxurynails.com", 0), (booking_url, 8000)]
        assert (outcome.pages_attempted, outcome.pages_fetched) == (2, 2)
        assert session.closed is True

    def test_falls_back_to_page_plan(self, pipeline_settings: PricingPipelineSettings) -> None:
        session = FakeRenderSession(
            {
                "https://luxurynails.com": "<p>Welcome to Luxury Nails</p>",
                "https://luxurynails.com/services": MENU_PAGE,
            }
        )

        outcome = _scraper(pipeline_settings, session).scrape("https://luxurynails.com", competitor="Luxury Nails")

        assert outcome.page_url == "https://luxurynails.com/services"
        assert len(outcome.services) == 2
        assert session.closed is True

    def test_requires_browser_factory(self, pipeline_settings: PricingPipelineSettings) -> None:
        with pytest.raises(RuntimeError):
            _scraper(pipeline_settings, None).scrape("https://luxurynails.com", competitor="Luxury Nails")

    def test_pages_need_an_open_session(self, pipeline_settings: PricingPipelineSettings) -> None:
        scraper = _scraper(pipeline_settings, FakeRenderSession({}))
        with pytest.raises(RuntimeError, match="not open"):
            scraper.load_page("https://luxurynails.com")
        with pytest.raises(RuntimeError, match="not open"):
            scraper._scrape_booking_pages("https://luxurynails.com", competitor="Luxury Nails")
