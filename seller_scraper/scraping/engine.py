"""
Seller scraping engine: runs every target of one run on one browser session.
"""

from __future__ import annotations

import logging
from typing import Protocol

from seller_scraper.config import ScraperSettings
from seller_scraper.domain.marketplaces import (
    Target,
    build_targets,
    cap_identifiers,
    select_marketplaces,
)
from seller_scraper.domain.runs import RunInput
from seller_scraper.domain.sellers import OutputRow
from seller_scraper.scraping.browser import BrowserFactory, BrowserPage, BrowserSession
from seller_scraper.scraping.logging_utils import log_event
from seller_scraper.scraping.pacing import JitteredPacer
from seller_scraper.scraping.pipeline import TargetPipeline

logger = logging.getLogger(__name__)

RULE = "═" * 60


class RunSink(Protocol):
    def log(self, message: str) -> None:
        ...

    def add_rows(self, rows: list[OutputRow]) -> None:
        ...


class SellerScrapingEngine:
    """
    Processes targets strictly in order, identifier-major, marketplace-minor.
    """

    def __init__(
        self,
        *,
        settings: ScraperSettings,
        browser_factory: BrowserFactory,
        pacer: JitteredPacer | None = None,
    ) -> None:
        self._settings = settings
        self._browser_factory = browser_factory
        self._pacer = pacer or JitteredPacer()

    def run(self, run_input: RunInput, sink: RunSink) -> int:
        """
        Scrape all targets of `run_input`, streaming rows into `sink`.

        Returns the number of rows produced.
        """

        identifiers = cap_identifiers(run_input.identifiers, run_input.max_count)
        marketplaces = select_marketplaces(run_input.marketplaces)
        sink.log(f"Config: {len(identifiers)} ASINs × {len(marketplaces)} marketplaces")
        sink.log(
            f"Delay: ~{run_input.delay_ms}ms | "
            f"Skip Amazon sellers: {str(run_input.skip_platform_only).lower()}"
        )

        pipeline = TargetPipeline(
            settings=self._settings,
            pacer=self._pacer,
            log=sink.log,
            delay_ms=run_input.delay_ms,
            skip_platform_only=run_input.skip_platform_only,
        )

        row_count = 0
        browser = self._browser_factory()
        try:
            current_identifier: str | None = None
            for target in build_targets(identifiers, marketplaces):
                if target.identifier != current_identifier:
                    current_identifier = target.identifier
                    sink.log(RULE)
                    sink.log(f"ASIN: {target.identifier}")
                    sink.log(RULE)

                marketplace = target.marketplace
                sink.log(f"─── {marketplace.code} ({marketplace.domain}) ───")
                rows = self._process_target(browser, pipeline, target, sink)
                sink.add_rows(rows)
                row_count += len(rows)

                self._pacer.wait(run_input.delay_ms)
        finally:
            browser.close()

        sink.log(RULE)
        sink.log(f"DONE — {row_count} rows")
        sink.log(RULE)
        log_event(
            logger,
            logging.INFO,
            "run_targets_completed",
            identifiers=len(identifiers),
            marketplaces=len(marketplaces),
            rows=row_count,
        )
        return row_count

    @staticmethod
    def _process_target(
        browser: BrowserSession,
        pipeline: TargetPipeline,
        target: Target,
        sink: RunSink,
    ) -> list[OutputRow]:
        page: BrowserPage | None = None
        try:
            page = browser.new_page()
            return pipeline.process(page, target)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            sink.log(f"  ✗ Error: {message}")
            return [OutputRow.failure(target=target, message=message)]
        finally:
            if page is not None:
                try:
                    page.close()
                except Exception as exc:
                    logger.warning(
                        "Page close failed identifier=%s marketplace=%s error=%s",
                        target.identifier,
                        target.marketplace.code,
                        exc,
                    )
