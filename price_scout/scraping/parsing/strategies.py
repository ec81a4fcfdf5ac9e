"""
Ordered extraction strategies, most reliable first.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from price_scout.domain.competitor_pricing import ExtractedService, ServiceCategory
from price_scout.scraping.config.models import ExtractionSettings
from price_scout.scraping.parsing.price_patterns import (
    PriceMatch,
    categorize_service,
    clean_service_name,
    find_price,
    has_domain_keyword,
    strip_price,
)

_PLAUSIBLE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z &'/()+\-]{2,79}$")
_PRICE_CLASS_RE = re.compile(r"price|cost", re.IGNORECASE)
MAX_LEAF_CHILDREN = 2
MAX_LEAF_TEXT_CHARS = 200
MIN_NAME_CHARS = 3


@dataclass
class ParsedPage:
    """
    Parsed document plus its visible text split into non-empty lines.
    """

    soup: BeautifulSoup
    lines: list[str] = field(default_factory=list)

    @classmethod
    def from_html(cls, html: str) -> ParsedPage:
        soup = BeautifulSoup(html, "html.parser")
        for node in soup(["script", "style", "noscript", "template"]):
            node.decompose()
        return cls(soup=soup, lines=_split_lines(soup.get_text("\n")))

    @classmethod
    def from_text(cls, text: str) -> ParsedPage:
        return cls(soup=BeautifulSoup("", "html.parser"), lines=_split_lines(text))


def _split_lines(text: str) -> list[str]:
    return [cleaned for cleaned in (" ".join(line.split()) for line in text.splitlines()) if cleaned]


def _node_text(node: Tag) -> str:
    return " ".join(node.get_text(" ", strip=True).split())


class ExtractionStrategy(ABC):
    """
    One way of pulling (service, price) pairs out of a page.
    """

    source: str
    confidence: float

    @abstractmethod
    def extract(self, page: ParsedPage, settings: ExtractionSettings) -> list[ExtractedService]:
        """
        Return every service this strategy recognizes on the page.
        """

    def _find_price(self, text: str, settings: ExtractionSettings) -> PriceMatch | None:
        return find_price(
            text,
            min_price=settings.min_price,
            max_price=settings.max_price,
            allow_bare_decimal=has_domain_keyword(text),
        )

    def _service(
        self,
        *,
        name: str,
        category: ServiceCategory,
        match: PriceMatch,
    ) -> ExtractedService:
        return ExtractedService(
            service_name=clean_service_name(name),
            service_type=category,
            price=match.value,
            confidence=self.confidence,
            source=self.source,
            price_range=match.price_range,
        )


class TableRowStrategy(ExtractionStrategy):
    """
    Table rows and menu-item blocks: first cell names the service.
    """

    source = "table-row"
    confidence = 0.9
    selectors = "tr, .service-item, .price-item, .menu-item"

    def extract(self, page: ParsedPage, settings: ExtractionSettings) -> list[ExtractedService]:
        services: list[ExtractedService] = []
        for row in page.soup.select(self.selectors)[: settings.max_elements]:
            # Layout rows wrapping a nested menu are read through their inner rows.
            if row.find(["tr", "table"]) is not None:
                continue
            row_text = _node_text(row)
            match = self._find_price(row_text, settings)
            if match is None:
                continue

            if row.name == "tr":
                cells = row.find_all(["td", "th"], recursive=False)
            else:
                cells = row.find_all(True, recursive=False)
            first_cell = _node_text(cells[0]) if cells else ""

            if _PLAUSIBLE_NAME_RE.match(first_cell):
                name = first_cell
                category = categorize_service(name)
                if category is ServiceCategory.OTHER:
                    category = categorize_service(row_text)
            else:
                name = strip_price(row_text, match)
                category = categorize_service(name)
            if len(name) < MIN_NAME_CHARS:
                continue
            services.append(self._service(name=name, category=category, match=match))
        return services


class ListItemStrategy(ExtractionStrategy):
    """
    List items and service/price divs that carry both a price and a nail keyword.
    """

    source = "list-item"
    confidence = 0.8
    selectors = "ul li, ol li, div.service, div.price"

    def extract(self, page: ParsedPage, settings: ExtractionSettings) -> list[ExtractedService]:
        services: list[ExtractedService] = []
        for item in page.soup.select(self.selectors)[: settings.max_elements]:
            text = _node_text(item)
            if not text or not has_domain_keyword(text):
                continue
            match = self._find_price(text, settings)
            if match is None:
                continue
            name = strip_price(text, match)
            if len(name) < MIN_NAME_CHARS:
                continue
            services.append(self._service(name=name, category=categorize_service(text), match=match))
        return services


class LeafElementStrategy(ExtractionStrategy):
    """
    Small headings, paragraphs and spans holding a priced service.
    """

    source = "leaf-element"
    confidence = 0.7
    tags = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "span", "div", "strong", "dt", "dd"]

    def extract(self, page: ParsedPage, settings: ExtractionSettings) -> list[ExtractedService]:
        services: list[ExtractedService] = []
        for element in page.soup.find_all(self.tags)[: settings.max_elements * 3]:
            if len(element.find_all(True, recursive=False)) > MAX_LEAF_CHILDREN:
                continue
            text = _node_text(element)
            if not text or len(text) > MAX_LEAF_TEXT_CHARS:
                continue
            match = self._find_price(text, settings)
            if match is None:
                continue

            name = strip_price(text, match)
            context = text
            if not has_domain_keyword(text):
                # A bare price tag borrows the label printed next to it.
                if not _PRICE_CLASS_RE.search(" ".join(element.get("class") or [])):
                    continue
                context = self._neighbour_text(element)
                if not has_domain_keyword(context):
                    continue
                name = context
            elif len(name) < MIN_NAME_CHARS:
                name = self._neighbour_text(element)
                context = f"{name} {text}"

            if len(name) < MIN_NAME_CHARS:
                continue
            services.append(self._service(name=name, category=categorize_service(context), match=match))
        return services

    @staticmethod
    def _neighbour_text(element: Tag) -> str:
        sibling = element.find_previous_sibling()
        if isinstance(sibling, Tag):
            text = _node_text(sibling)
            if text:
                return text
        return ""


class LinePairStrategy(ExtractionStrategy):
    """
    Visible-text lines: a priced line is named by itself or by the line above.

    Catches menus where the name and the price sit in separate elements.
    """

    source = "line-pair"
    confidence = 0.6

    def extract(self, page: ParsedPage, settings: ExtractionSettings) -> list[ExtractedService]:
        services: list[ExtractedService] = []
        lines = page.lines
        for index, line in enumerate(lines):
            match = find_price(
                line,
                min_price=settings.min_price,
                max_price=settings.max_price,
            )
            if match is None:
                continue

            own_text = strip_price(line, match)
            category = categorize_service(own_text)
            name = own_text
            if category is ServiceCategory.OTHER and index > 0:
                previous = lines[index - 1]
                if find_price(previous, min_price=settings.min_price, max_price=settings.max_price) is not None:
                    continue
                category = categorize_service(f"{previous} {own_text}")
                name = previous if len(own_text) < MIN_NAME_CHARS else f"{previous} {own_text}"

            if category is ServiceCategory.OTHER or len(name) < MIN_NAME_CHARS:
                continue
            services.append(self._service(name=name, category=category, match=match))
        return services


DEFAULT_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    TableRowStrategy(),
    ListItemStrategy(),
    LeafElementStrategy(),
    LinePairStrategy(),
)
