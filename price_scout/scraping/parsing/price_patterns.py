"""
Price pattern matching and service categorization for nail-salon menus.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from price_scout.domain.competitor_pricing import ServiceCategory

_AMOUNT = r"(\d{1,3}(?:,\d{3})*(?:\.\d{1,2})?)(?!\d)"

# Ordered by precedence when two matches overlap.
PRICE_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("range", re.compile(rf"\$\s*{_AMOUNT}\s*(?:-|–|—|to)\s*\$?\s*{_AMOUNT}", re.IGNORECASE)),
    ("starting", re.compile(rf"(?:starting\s+(?:at|from)|starts\s+at|from)\s*\$\s*{_AMOUNT}", re.IGNORECASE)),
    ("dollar", re.compile(rf"\$\s*{_AMOUNT}")),
    ("usd", re.compile(rf"\b{_AMOUNT}\s*(?:USD|dollars)\b", re.IGNORECASE)),
    ("price_label", re.compile(rf"price\s*:\s*{_AMOUNT}", re.IGNORECASE)),
)
BARE_DECIMAL_PATTERN = re.compile(r"(?<![\d.$])(\d{2,3}\.\d{2})(?![\d%])")

DOMAIN_KEYWORDS = (
    "manicure",
    "mani",
    "pedicure",
    "pedi",
    "gel",
    "shellac",
    "acrylic",
    "full set",
    "fill",
    "nail",
    "polish",
    "dip",
    "powder",
    "sns",
    "ombre",
    "tips",
)

# Ordered category rules, first match wins.
CATEGORY_RULES: tuple[tuple[ServiceCategory, re.Pattern[str]], ...] = (
    (ServiceCategory.OTHER, re.compile(r"\bremov(?:al|e)\b|\bsoak[\s-]?off only\b|\bcolor fill\b|\bpolish change\b")),
    (
        ServiceCategory.ACRYLIC,
        re.compile(r"\bacrylics?\b|\bfull[\s-]set\b|\bpink\s*(?:&|and)\s*white\b|\bextensions?\b|\bsculpt\w*|\bombre\b|\btips\b"),
    ),
    (ServiceCategory.DIP, re.compile(r"\bdip(?:ping)?\b|\bsns\b|\bdip powder\b|\bpowder\b")),
    (ServiceCategory.PEDICURE, re.compile(r"\bpedicures?\b|\bpedi\b|\bfoot spa\b")),
    (ServiceCategory.GEL, re.compile(r"\bgel\b|\bgel[\s-]?x\b|\bshellac\b|\bgelish\b|\bno[\s-]chip\b")),
    (ServiceCategory.MANICURE, re.compile(r"\bmanicures?\b|\bmani\b")),
)

_DOMAIN_KEYWORD_RE = re.compile(r"\b(?:" + "|".join(re.escape(word) for word in DOMAIN_KEYWORDS) + r")", re.IGNORECASE)
_SEPARATORS = " \t-–—:|.,*•·…$"


@dataclass(frozen=True)
class PriceMatch:
    """
    One price found in a text fragment.
    """

    value: float
    start: int
    end: int
    kind: str
    upper: float | None = None

    @property
    def price_range(self) -> tuple[float, float] | None:
        if self.upper is None:
            return None
        return (self.value, self.upper)


def _to_float(raw: str) -> float | None:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return None


def find_price(
    text: str,
    *,
    min_price: float = 10.0,
    max_price: float = 300.0,
    allow_bare_decimal: bool = False,
) -> PriceMatch | None:
    """
    Leftmost plausible price in `text`; ranges resolve to their lower bound.

    When matches overlap, pattern order decides, so "$35-$45" is a range and
    "from $30" is a starting price. Bare decimals like "35.00" count only when
    `allow_bare_decimal` is set, which callers do after checking for a
    nail-service keyword.
    """

    found: list[tuple[int, PriceMatch]] = []
    for priority, (kind, pattern) in enumerate(PRICE_PATTERNS):
        for match in pattern.finditer(text):
            value = _to_float(match.group(1))
            if value is None or not min_price <= value <= max_price:
                continue
            upper = None
            if kind == "range":
                upper = _to_float(match.group(2))
                if upper is not None and upper < value:
                    upper = None
            found.append(
                (priority, PriceMatch(value=value, start=match.start(), end=match.end(), kind=kind, upper=upper))
            )

    if found:
        leftmost = min(found, key=lambda item: (item[1].start, item[0]))[1]
        overlapping = [item for item in found if item[1].start < leftmost.end and leftmost.start < item[1].end]
        return min(overlapping, key=lambda item: (item[0], item[1].start))[1]

    if allow_bare_decimal:
        for match in BARE_DECIMAL_PATTERN.finditer(text):
            value = _to_float(match.group(1))
            if value is not None and min_price <= value <= max_price:
                return PriceMatch(value=value, start=match.start(), end=match.end(), kind="bare")
    return None


def has_domain_keyword(text: str) -> bool:
    return _DOMAIN_KEYWORD_RE.search(text) is not None


def categorize_service(text: str) -> ServiceCategory:
    """
    Map free service text to a category.

    "Gel Pedicure" is a pedicure, "Acrylic Fill" is acrylic, "Color Fill" and
    "Gel Removal" are other.
    """

    normalized = " ".join(text.lower().split())
    for category, pattern in CATEGORY_RULES:
        if pattern.search(normalized):
            return category
    return ServiceCategory.OTHER


def strip_price(text: str, match: PriceMatch) -> str:
    """
    Text with the matched price removed and separators trimmed.
    """

    remainder = f"{text[: match.start]} {text[match.end :]}"
    return " ".join(remainder.split()).strip(_SEPARATORS)


def clean_service_name(text: str, limit: int = 80) -> str:
    cleaned = " ".join(text.split()).strip(_SEPARATORS)
    return cleaned[:limit].rstrip()
