"""
Run a seller scrape from the CLI and print the rows as JSON.
"""

from __future__ import annotations

import argparse
import json

from seller_scraper.config import configure_logging, get_scraper_settings
from seller_scraper.domain.runs import RunInput
from seller_scraper.domain.sellers import OutputRow
from seller_scraper.scraping.browser import create_browser_factory
from seller_scraper.scraping.engine import SellerScrapingEngine


class _ConsoleSink:
    def __init__(self) -> None:
        self.rows: list[OutputRow] = []

    def log(self, message: str) -> None:
        print(message, flush=True)

    def add_rows(self, rows: list[OutputRow]) -> None:
        self.rows.extend(rows)


def main() -> int:
    settings = get_scraper_settings()
    parser = argparse.ArgumentParser(description="Scrape seller compliance data for ASINs.")
    parser.add_argument("identifiers", nargs="+", help="Product identifiers (ASINs).")
    parser.add_argument(
        "--marketplace",
        dest="marketplaces",
        action="append",
        default=[],
        help="Marketplace code filter, repeatable (e.g. --marketplace UK --marketplace DE).",
    )
    parser.add_argument("--max-count", type=int, default=0, help="Cap on identifiers processed.")
    parser.add_argument(
        "--delay-ms",
        type=int,
        default=settings.default_delay_ms,
        help="Base delay between requests in milliseconds.",
    )
    parser.add_argument(
        "--include-platform-only",
        action="store_true",
        help="Do not skip listings sold only by the platform.",
    )
    args = parser.parse_args()

    configure_logging()
    engine = SellerScrapingEngine(
        settings=settings,
        browser_factory=create_browser_factory(settings),
    )
    sink = _ConsoleSink()
    engine.run(
        RunInput(
            identifiers=args.identifiers,
            max_count=args.max_count,
            marketplaces=args.marketplaces,
            delay_ms=args.delay_ms,
            skip_platform_only=settings.skip_platform_only and not args.include_platform_only,
        ),
        sink,
    )

    print(json.dumps([row.to_dict() for row in sink.rows], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
