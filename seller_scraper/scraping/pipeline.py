"""
Per-target pipeline: product page -> offers panel -> seller profiles.
"""

from __future__ import annotations

import logging

from seller_scraper.config import ScraperSettings
from seller_scraper.domain.marketplaces import Target
from seller_scraper.domain.sellers import OutputRow, SellerRef
from seller_scraper.scraping.browser import BrowserPage
from seller_scraper.scraping.extractors import (
    OfferListExtractor,
    ProductPageExtractor,
    RunLog,
    SellerProfileExtractor,
)
from seller_scraper.scraping.logging_utils import log_event
from seller_scraper.scraping.pacing import JitteredPacer
from seller_scraper.scraping.visit_set import SellerVisitSet

logger = logging.getLogger(__name__)


class TargetPipeline:
    """
    Turns one (identifier, marketplace) target into output rows.

    Always returns at least one row: one per visited seller, otherwise a single
    placeholder (`buy_box`, `not_found` or `error`).
    """

    def __init__(
        self,
        *,
        settings: ScraperSettings,
        pacer: JitteredPacer,
        log: RunLog,
        delay_ms: int,
        skip_platform_only: bool = True,
    ) -> None:
        self._pacer = pacer
        self._log = log
        self._delay_ms = delay_ms
        self._skip_platform_only = skip_platform_only
        self._product_page = ProductPageExtractor(settings=settings, pacer=pacer, log=log)
        self._offer_list = OfferListExtractor(settings=settings, pacer=pacer, log=log)
        self._seller_profile = SellerProfileExtractor(settings=settings, pacer=pacer, log=log)

    def process(self, page: BrowserPage, target: Target) -> list[OutputRow]:
        try:
            return self._process(page, target)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            self._log(f"  ✗ Error: {message}")
            log_event(
                logger,
                logging.ERROR,
                "target_failed",
                identifier=target.identifier,
                marketplace=target.marketplace.code,
                error=message,
            )
            return [OutputRow.failure(target=target, message=message)]

    def _process(self, page: BrowserPage, target: Target) -> list[OutputRow]:
        product = self._product_page.extract(page, target)
        if product.not_found:
            return [OutputRow.placeholder(target=target, primary_seller=None, not_found=True)]

        primary_seller = product.primary_seller
        offer_sellers: list[SellerRef] = []
        if product.has_other_sellers:
            offer_sellers = self._offer_list.extract(page)

        visit_set = SellerVisitSet.from_discovery(primary_seller, offer_sellers)

        if self._skip_platform_only and visit_set.is_platform_only(primary_seller):
            self._log(f"  ○ {primary_seller.display_name}-only listing, skipping")
            return [OutputRow.placeholder(target=target, primary_seller=primary_seller)]

        self._log(f"  → {len(visit_set)} 3P seller(s) to scrape")

        rows: list[OutputRow] = []
        for seller in visit_set:
            self._pacer.wait(self._delay_ms)
            profile = self._seller_profile.extract(page, seller.seller_id, target)
            rows.append(OutputRow.for_seller(target=target, seller=seller, profile=profile))

        if not rows:
            rows.append(OutputRow.placeholder(target=target, primary_seller=primary_seller))

        log_event(
            logger,
            logging.INFO,
            "target_scraped",
            identifier=target.identifier,
            marketplace=target.marketplace.code,
            sellers_visited=len(visit_set),
            rows=len(rows),
        )
        return rows
