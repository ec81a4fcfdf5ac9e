"""
Per-domain request pacing shared by page fetches.
"""

from __future__ import annotations

import threading
import time
from urllib.parse import urlparse


class DomainRateLimiter:
    """
    Enforces a minimum interval between requests to the same host.

    Worker threads scraping different competitors share one limiter, so the
    bookkeeping is guarded by a lock.
    """

    def __init__(self, *, default_rate_limit_per_second: float) -> None:
        self._default_rate_limit_per_second = max(0.1, default_rate_limit_per_second)
        self._next_slot_by_domain: dict[str, float] = {}
        self._lock = threading.Lock()

    @staticmethod
    def domain_for(url: str) -> str:
        parsed = urlparse(url)
        domain = (parsed.netloc or parsed.path.split("/", 1)[0]).lower()
        return domain[4:] if domain.startswith("www.") else domain

    def wait(self, *, url: str, rate_limit_per_second: float | None = None) -> float:
        """
        Sleep until this domain's next slot and return the seconds waited.
        """

        domain = self.domain_for(url)
        if not domain:
            return 0.0

        min_interval = 1.0 / max(0.1, rate_limit_per_second or self._default_rate_limit_per_second)

        # Reserve the slot under the lock, sleep outside it so other domains proceed.
        with self._lock:
            now = time.monotonic()
            slot = max(now, self._next_slot_by_domain.get(domain, 0.0))
            self._next_slot_by_domain[domain] = slot + min_interval

        wait_seconds = slot - now
        if wait_seconds > 0:
            time.sleep(wait_seconds)
        return max(0.0, wait_seconds)

    def reset(self) -> None:
        with self._lock:
            self._next_slot_by_domain.clear()
