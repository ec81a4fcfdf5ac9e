"""
Run competitor website discovery and price extraction from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging

from price_scout.config import get_app_settings
from price_scout.scraping.config import load_competitor_stubs
from price_scout.services.competitor_pricing_service import CompetitorPricingService


def main() -> int:
    parser = argparse.ArgumentParser(description="Price nearby nail-salon competitors.")
    parser.add_argument(
        "competitors_file",
        help="JSON file with a list of {name, address, phone?, website?, price_level?}.",
    )
    parser.add_argument(
        "--competitor",
        dest="competitor",
        default=None,
        help="Optional competitor name filter.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_app_settings().log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    stubs = load_competitor_stubs(path=args.competitors_file)
    if args.competitor:
        wanted = args.competitor.strip().lower()
        stubs = [stub for stub in stubs if stub.name.lower() == wanted]
    if not stubs:
        parser.error("No competitors matched the run criteria.")

    results = CompetitorPricingService().price_competitors(stubs)
    payload = [
        {
            "competitor": name,
            "source": result.source.value,
            "success": result.success,
            "confidence": result.confidence,
            "prices": result.category_prices(),
            "reason": result.reason,
            "page_url": result.page_url,
        }
        for name, result in results.items()
    ]
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
