"""
Domain classifier: real salon website versus directory, social or junk page.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup

from price_scout import reason_codes
from price_scout.domain.competitor_pricing import DomainVerdict
from price_scout.scraping.config.models import ClassifierSettings

BLOCKED_SCORE = -999
INVALID_STRUCTURE_SCORE = -50

BLOCKED_DOMAINS = frozenset(
    {
        # social
        "facebook.com",
        "fb.com",
        "instagram.com",
        "twitter.com",
        "x.com",
        "tiktok.com",
        "linkedin.com",
        "youtube.com",
        "pinterest.com",
        "tumblr.com",
        # maps, directories, review sites
        "google.com",
        "goo.gl",
        "mapquest.com",
        "yelp.com",
        "yellowpages.com",
        "local.com",
        "superpages.com",
        "manta.com",
        "bbb.org",
        "chamberofcommerce.com",
        "hotfrog.com",
        "citysearch.com",
        "kudzu.com",
        "foursquare.com",
        "salondiscover.com",
        "us-business.info",
        "nextdoor.com",
        "tripadvisor.com",
        # booking platforms
        "booksy.com",
        "styleseat.com",
        "vagaro.com",
        "fresha.com",
        "schedulicity.com",
        "genbook.com",
        "setmore.com",
        "mindbodyonline.com",
        # site builders and hosted pages
        "business.site",
        "square.site",
        "wix.com",
        "weebly.com",
        "wordpress.com",
        "blogspot.com",
        # link aggregators
        "linktr.ee",
        "bio.link",
        "beacons.ai",
        "hoo.be",
        "tap.bio",
    }
)

VALID_TLDS = frozenset({"com", "net", "org", "us", "biz", "info"})
GENERIC_LABELS = frozenset({"nails", "salon", "spa", "beauty", "hair"})
# Substring match against the registrable label.
SUSPICIOUS_SUBSTRINGS = ("review", "directory", "listing", "guide", "search")
# Must be a whole hyphen-separated part of a label ("find-nails" but not "findlay").
SUSPICIOUS_PARTS = frozenset({"map", "maps", "find", "local", "city"})

POSITIVE_KEYWORDS: dict[str, int] = {
    "services": 15,
    "pricing": 15,
    "price list": 15,
    "menu": 10,
    "manicure": 8,
    "pedicure": 8,
    "gel": 5,
    "acrylic": 5,
    "nail salon": 5,
    "appointment": 5,
    "booking": 5,
    "book now": 5,
}

NEGATIVE_KEYWORDS: dict[str, int] = {
    "directory listing": -30,
    "find businesses near": -30,
    "business directory": -30,
    "local directory": -30,
    "business listing": -20,
    "redirecting to facebook": -20,
    "follow us on facebook": -15,
    "find us on facebook": -15,
    "write a review": -10,
    "reviews for": -10,
    "sponsored listing": -10,
    "directory": -5,
    "terms of service": -2,
}

_SPACE_RE = re.compile(r"\s+")


def extract_domain(url: str | None) -> str | None:
    """
    Lowercased hostname without `www.`, or None when the URL has no host.
    """

    if not url:
        return None
    candidate = url.strip()
    if "://" not in candidate:
        candidate = f"https://{candidate.lstrip('/')}"
    try:
        host = urlparse(candidate).hostname
    except ValueError:
        return None
    if not host:
        return None
    host = host.lower().strip(".")
    if host.startswith("www."):
        host = host[4:]
    return host if "." in host else None


def is_blocked_domain(url: str | None) -> bool:
    """
    True when the URL's host is, or is a subdomain of, a deny-listed domain.
    """

    domain = extract_domain(url)
    if domain is None:
        return False
    return _matches_blocklist(domain)


def _matches_blocklist(domain: str) -> bool:
    parts = domain.split(".")
    for index in range(len(parts) - 1):
        if ".".join(parts[index:]) in BLOCKED_DOMAINS:
            return True
    return False


def page_text(html: str) -> str:
    """
    Lowercased visible text for keyword scans, title included.
    """

    soup = BeautifulSoup(html, "html.parser")
    for node in soup(["script", "style", "noscript"]):
        node.decompose()
    return _SPACE_RE.sub(" ", soup.get_text(" ")).lower()


class DomainClassifier:
    """
    Scores a candidate URL (and optionally its HTML) as a real salon website.
    """

    def __init__(self, settings: ClassifierSettings | None = None) -> None:
        self.settings = settings or ClassifierSettings()

    def classify(self, url: str | None, html: str | None = None) -> DomainVerdict:
        domain = extract_domain(url)
        if domain is None:
            return DomainVerdict(
                domain=(url or "").strip(),
                score=INVALID_STRUCTURE_SCORE,
                is_real=False,
                reason=reason_codes.INVALID_URL,
            )

        if _matches_blocklist(domain):
            return DomainVerdict(
                domain=domain,
                score=BLOCKED_SCORE,
                is_real=False,
                reason=reason_codes.BLOCKED_DOMAIN,
            )

        if not self._has_valid_structure(domain):
            return DomainVerdict(
                domain=domain,
                score=INVALID_STRUCTURE_SCORE,
                is_real=False,
                reason=reason_codes.INVALID_STRUCTURE,
            )

        if not html:
            return DomainVerdict(domain=domain, score=0, is_real=False, reason=reason_codes.NO_CONTENT)

        score, unique_positive = self.score_content(html)
        is_real = (
            score >= self.settings.real_threshold
            and unique_positive >= self.settings.min_keywords
        )
        return DomainVerdict(
            domain=domain,
            score=score,
            is_real=is_real,
            reason=reason_codes.REAL_BUSINESS if is_real else reason_codes.LOW_CONFIDENCE,
            unique_positive_keywords=unique_positive,
        )

    def classify_urls(self, urls: Iterable[str]) -> tuple[list[str], list[tuple[str, str]]]:
        """
        Split URLs into (valid, [(invalid_url, reason)]) on structure alone.
        """

        valid: list[str] = []
        invalid: list[tuple[str, str]] = []
        for url in urls:
            verdict = self.classify(url)
            if verdict.reason == reason_codes.NO_CONTENT:
                valid.append(url)
            else:
                invalid.append((url, verdict.reason))
        return valid, invalid

    @staticmethod
    def score_content(html: str) -> tuple[int, int]:
        """
        Weighted keyword score and the number of distinct positive keywords.

        Each keyword counts once no matter how often it appears.
        """

        text = page_text(html)
        score = 0
        unique_positive = 0
        for keyword, weight in POSITIVE_KEYWORDS.items():
            if keyword in text:
                score += weight
                unique_positive += 1
        for keyword, weight in NEGATIVE_KEYWORDS.items():
            if keyword in text:
                score += weight
        return score, unique_positive

    @staticmethod
    def _has_valid_structure(domain: str) -> bool:
        labels = domain.split(".")
        if len(labels) < 2 or labels[-1] not in VALID_TLDS:
            return False

        registrable = labels[-2]
        if registrable in GENERIC_LABELS:
            return False
        if any(token in registrable for token in SUSPICIOUS_SUBSTRINGS):
            return False
        for label in labels[:-1]:
            if SUSPICIOUS_PARTS.intersection(label.split("-")):
                return False
        return True


def select_best_url(urls: Sequence[str], business_name: str) -> str | None:
    """
    Pick the non-blocked URL whose domain carries a word of the business name.

    Falls back to the first non-blocked URL.
    """

    usable = [url for url in urls if extract_domain(url) and not is_blocked_domain(url)]
    if not usable:
        return None

    name_parts = significant_name_parts(business_name)
    for url in usable:
        domain = extract_domain(url) or ""
        if any(part in domain for part in name_parts):
            return url
    return usable[0]


def significant_name_parts(business_name: str) -> list[str]:
    """
    Lowercase alphanumeric words longer than three characters.
    """

    words = re.findall(r"[a-z0-9]+", business_name.lower())
    return [word for word in words if len(word) > 3 and word not in GENERIC_LABELS]
