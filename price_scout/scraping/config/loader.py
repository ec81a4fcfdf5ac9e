"""
Environment + JSON config loader for the pricing pipeline.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from price_scout.config import (
    _get_bool_env,
    _get_float_env,
    _get_int_env,
    _get_list_env,
    _get_str_env,
    _load_env_once,
)
from price_scout.domain.competitor_pricing import CompetitorStub
from price_scout.scraping.config.models import (
    ClassifierSettings,
    DiscoverySettings,
    ExtractionSettings,
    HTTPFetchSettings,
    PricingPipelineSettings,
    ScrapeSettings,
    SearchSettings,
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def _collect_api_keys(list_name: str, single_names: tuple[str, ...]) -> tuple[str, ...]:
    """
    Merge a comma-separated key list with numbered single-key variables.
    """

    _load_env_once()
    keys: list[str] = list(_get_list_env(list_name))
    for name in single_names:
        value = (os.getenv(name) or "").strip()
        if value:
            keys.append(value)
    return tuple(dict.fromkeys(keys))


@lru_cache(maxsize=1)
def get_pricing_pipeline_settings() -> PricingPipelineSettings:
    """
    Return cached pipeline settings from environment variables.
    """

    min_price = max(0.0, _get_float_env("PRICE_SCOUT_MIN_PRICE", 10.0))
    return PricingPipelineSettings(
        http=HTTPFetchSettings(
            user_agent=_get_str_env("PRICE_SCOUT_USER_AGENT", DEFAULT_USER_AGENT),
            timeout_seconds=max(1.0, _get_float_env("PRICE_SCOUT_HTTP_TIMEOUT_SECONDS", 10.0)),
            max_retries=max(0, _get_int_env("PRICE_SCOUT_FETCH_MAX_RETRIES", 2)),
            backoff_seconds=max(0.0, _get_float_env("PRICE_SCOUT_FETCH_BACKOFF_SECONDS", 1.0)),
            rate_limit_per_second=max(
                0.1,
                _get_float_env("PRICE_SCOUT_RATE_LIMIT_PER_SECOND", 2.0),
            ),
        ),
        search=SearchSettings(
            providers=tuple(
                item if ":" in item else item.lower()
                for item in _get_list_env("PRICE_SCOUT_SEARCH_PROVIDERS", ("brave", "duckduckgo"))
            ),
            primary_provider=_get_str_env("PRICE_SCOUT_SEARCH_PRIMARY_PROVIDER", "brave").lower(),
            brave_api_keys=_collect_api_keys(
                "BRAVE_SEARCH_API_KEYS",
                ("BRAVE_SEARCH_API_KEY", "BRAVE_SEARCH_API_KEY_2", "BRAVE_SEARCH_API_KEY_3"),
            ),
            bing_api_keys=_collect_api_keys("BING_SEARCH_API_KEYS", ("BING_SEARCH_API_KEY",)),
            result_count=min(20, max(1, _get_int_env("PRICE_SCOUT_SEARCH_RESULT_COUNT", 5))),
            timeout_seconds=max(1.0, _get_float_env("PRICE_SCOUT_SEARCH_TIMEOUT_SECONDS", 10.0)),
            cache_ttl_seconds=max(
                0.0,
                _get_float_env("PRICE_SCOUT_SEARCH_CACHE_TTL_SECONDS", 86400.0),
            ),
            max_attempts=max(1, _get_int_env("PRICE_SCOUT_SEARCH_MAX_ATTEMPTS", 3)),
            backoff_base_seconds=max(
                0.0,
                _get_float_env("PRICE_SCOUT_SEARCH_BACKOFF_BASE_SECONDS", 2.0),
            ),
            backoff_max_seconds=max(
                0.0,
                _get_float_env("PRICE_SCOUT_SEARCH_BACKOFF_MAX_SECONDS", 10.0),
            ),
            query_delay_seconds=max(
                0.0,
                _get_float_env("PRICE_SCOUT_SEARCH_QUERY_DELAY_SECONDS", 1.0),
            ),
        ),
        classifier=ClassifierSettings(
            real_threshold=_get_int_env("PRICE_SCOUT_CLASSIFIER_REAL_THRESHOLD", 20),
            min_keywords=max(0, _get_int_env("PRICE_SCOUT_CLASSIFIER_MIN_KEYWORDS", 2)),
        ),
        discovery=DiscoverySettings(
            enabled=_get_bool_env("PRICE_SCOUT_DISCOVERY_ENABLED", True),
            top_k=max(1, _get_int_env("PRICE_SCOUT_DISCOVERY_TOP_K", 3)),
            js_only_min_chars=max(0, _get_int_env("PRICE_SCOUT_DISCOVERY_JS_ONLY_MIN_CHARS", 5000)),
        ),
        extraction=ExtractionSettings(
            min_price=min_price,
            max_price=max(min_price, _get_float_env("PRICE_SCOUT_MAX_PRICE", 300.0)),
        ),
        scrape=ScrapeSettings(
            concurrency=max(1, _get_int_env("PRICE_SCOUT_SCRAPE_CONCURRENCY", 2)),
            min_discovery_score=_get_int_env("PRICE_SCOUT_MIN_DISCOVERY_SCORE", 20),
            max_pages=max(1, _get_int_env("PRICE_SCOUT_SCRAPE_MAX_PAGES", 4)),
            browser_enabled=_get_bool_env("PRICE_SCOUT_BROWSER_ENABLED", False),
            browser_timeout_seconds=max(
                5.0,
                _get_float_env("PRICE_SCOUT_BROWSER_TIMEOUT_SECONDS", 30.0),
            ),
        ),
    )


def load_competitor_stubs(*, path: str) -> list[CompetitorStub]:
    """
    Load competitor stubs from a JSON file.

    Accepts either a top-level list or an object with a `competitors` list.
    Entries without a name are ignored.
    """

    resolved = _resolve_path(path)
    if not resolved.exists():
        raise FileNotFoundError(f"Competitor file not found: {resolved}")

    raw_data = json.loads(resolved.read_text(encoding="utf-8"))
    entries = raw_data.get("competitors", []) if isinstance(raw_data, dict) else raw_data
    if not isinstance(entries, list):
        raise ValueError("Invalid competitor file: 'competitors' must be a list.")

    return [stub for stub in (parse_competitor_stub(entry) for entry in entries) if stub is not None]


def parse_competitor_stub(entry: object) -> CompetitorStub | None:
    if not isinstance(entry, dict):
        return None

    name = str(entry.get("name") or "").strip()
    if not name:
        return None

    return CompetitorStub(
        name=name,
        address=str(entry.get("address") or "").strip(),
        phone=_optional_str(entry.get("phone")),
        known_website=_optional_str(entry.get("website") or entry.get("known_website")),
        price_level=_optional_int(entry.get("price_level")),
    )


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _optional_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
