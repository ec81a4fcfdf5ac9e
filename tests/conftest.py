"""
tests/conftest.py

Shared fixtures: no real sleeping, fake HTTP session, fast pipeline settings.
"""

from __future__ import annotations

import time

import pytest
from fakes import FakeSession

from price_scout.scraping.config.models import (
    HTTPFetchSettings,
    PricingPipelineSettings,
    SearchSettings,
)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    """Backoff and pacing delays become no-ops."""
    monkeypatch.setattr(time, "sleep", lambda _seconds: None)


@pytest.fixture()
def pipeline_settings() -> PricingPipelineSettings:
    return PricingPipelineSettings(
        http=HTTPFetchSettings(
            user_agent="price-scout-tests",
            timeout_seconds=5.0,
            max_retries=1,
            backoff_seconds=0.0,
            rate_limit_per_second=1000.0,
        ),
        search=SearchSettings(
            providers=("brave",),
            brave_api_keys=("key-one", "key-two"),
            pre_request_delay_seconds=(0.0, 0.0),
            query_delay_seconds=0.0,
            backoff_base_seconds=0.0,
            backoff_max_seconds=0.0,
        ),
    )


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()
