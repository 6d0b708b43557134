"""
Stage extractors: product page, all-offers panel and seller profile.

Each stage is fail-soft. Navigation failures and missing elements end the
stage with an empty result; they never propagate to the pipeline.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from urllib.parse import parse_qs, urljoin, urlparse

from seller_scraper.config import ScraperSettings
from seller_scraper.domain.marketplaces import Target
from seller_scraper.domain.sellers import (
    DiscoverySource,
    ProductPageResult,
    SellerProfile,
    SellerRef,
)
from seller_scraper.scraping.browser import BrowserPage, PageElement
from seller_scraper.scraping.errors import NavigationError, PanelError, ScraperError
from seller_scraper.scraping.field_mapper import build_profile
from seller_scraper.scraping.logging_utils import log_event
from seller_scraper.scraping.pacing import JitteredPacer

logger = logging.getLogger(__name__)

RunLog = Callable[[str], None]

SELLER_ID_BASE_URL = "https://www.amazon.com"
SELLER_ID_REGEX = re.compile(r"seller=([A-Z0-9]+)")

BOT_CHALLENGE_MARKERS: tuple[str, ...] = (
    "Enter the characters you see below",
    "Type the characters you see in this image",
)
NOT_FOUND_TITLE_MARKER = "Page Not Found"
NOT_FOUND_BODY_MARKER = "we couldn't find that page"
PLATFORM_MARKER = "amazon"

PRODUCT_TITLE_SELECTOR = "#productTitle"
SELLER_LINK_SELECTOR = "#sellerProfileTriggerId"
MERCHANT_INFO_SELECTOR = "#merchantInfoFeature_feature_div"
OFFERS_INGRESS_BOX_SELECTOR = "#dynamic-aod-ingress-box"
OFFERS_INGRESS_LINK_SELECTOR = "#aod-ingress-link"
OFFER_LIST_SELECTOR = "#aod-offer-list"
PINNED_OFFER_SELECTOR = "#aod-pinned-offer"
OFFER_SELECTOR = "#aod-offer-list #aod-offer"
OFFER_SELLER_LINK_SELECTOR = 'a[href*="/gp/aag/main"]'
OFFER_SHIPS_FROM_SELECTOR = '[id*="shipsFrom"] .a-col-right'
OFFER_PRICE_SELECTOR = ".a-price .a-offscreen"
PANEL_CLOSE_SELECTOR = 'button[data-action="a-popover-close"], .aod-close-button, [aria-label="Close"]'
SHIPS_FROM_PREFIX_REGEX = re.compile(r"Dispatches from|Ships from", flags=re.IGNORECASE)

PROFILE_NAME_SELECTOR = "h1"
PROFILE_HEADING_SELECTOR = "h3, h2, h4"
PROFILE_CONTAINER_SELECTORS: tuple[str, ...] = (".a-box-inner", ".a-box", "section")
UNKNOWN_SELLER_NAME = "Unknown"

SELLER_DETAILS_HEADINGS: tuple[str, ...] = (
    "Detailed Seller Information",
    "Detaillierte Verkäuferinformationen",
    "Información detallada del vendedor",
    "Informazioni dettagliate sul venditore",
    "Informations détaillées sur le vendeur",
    "Gedetailleerde verkopersinformatie",
    "Detaljerad säljarinformation",
    "Szczegółowe informacje o sprzedawcy",
    "Satıcı Detaylı Bilgileri",
    "販売業者の詳細情報",
    "معلومات البائع التفصيلية",
    "معلومات تفصيلية عن البائع",
)


def extract_seller_id(href: str) -> str | None:
    """
    Read the `seller` query parameter from a relative or absolute link.
    """

    if not href:
        return None
    try:
        query = parse_qs(urlparse(urljoin(SELLER_ID_BASE_URL, href)).query)
    except ValueError:
        match = SELLER_ID_REGEX.search(href)
        return match.group(1) if match else None
    values = query.get("seller")
    return values[0] if values and values[0] else None


def _clean_inline(text: str) -> str:
    return " ".join(text.replace("\n", " ").split())


class StageExtractor:
    def __init__(
        self,
        *,
        settings: ScraperSettings,
        pacer: JitteredPacer,
        log: RunLog,
    ) -> None:
        self.settings = settings
        self.pacer = pacer
        self.log = log

    def _navigate(self, page: BrowserPage, url: str, *, settle_seconds: float) -> bool:
        try:
            page.goto(url, timeout_seconds=self.settings.navigation_timeout_seconds)
        except NavigationError as exc:
            log_event(logger, logging.WARNING, "navigation_failed", url=url, error=exc.reason)
            self.log(f"  ✗ Failed to load: {exc.reason}")
            return False
        self.pacer.pause(settle_seconds)
        return True


class ProductPageExtractor(StageExtractor):
    """
    Finds the buy-box seller and whether other offers exist.
    """

    def extract(self, page: BrowserPage, target: Target) -> ProductPageResult:
        marketplace = target.marketplace
        url = marketplace.product_url(target.identifier)
        self.log(f"  → Product page: {url}")

        if not self._navigate(page, url, settle_seconds=self.settings.product_settle_seconds):
            return ProductPageResult()

        html = page.content()
        if any(marker in html for marker in BOT_CHALLENGE_MARKERS):
            wait_seconds = self.settings.captcha_wait_seconds
            self.log(f"  ⚠ CAPTCHA detected on {marketplace.code} — waiting {wait_seconds:g}s...")
            log_event(
                logger,
                logging.WARNING,
                "bot_challenge_detected",
                marketplace=marketplace.code,
                identifier=target.identifier,
            )
            self.pacer.pause(wait_seconds)

        if self._is_not_found(page, html):
            self.log(f"  ✗ Product not found on {marketplace.code}")
            return ProductPageResult(not_found=True)

        primary_seller = self._primary_seller(page)

        ingress_box = page.query(OFFERS_INGRESS_BOX_SELECTOR)
        has_other_sellers = ingress_box is not None
        if ingress_box is not None:
            self.log(f"  ✓ Other sellers: {_clean_inline(ingress_box.text())}")
        else:
            self.log("  ○ No other sellers")

        return ProductPageResult(
            primary_seller=primary_seller,
            has_other_sellers=has_other_sellers,
        )

    @staticmethod
    def _is_not_found(page: BrowserPage, html: str) -> bool:
        marker_present = NOT_FOUND_TITLE_MARKER in page.title() or NOT_FOUND_BODY_MARKER in html
        return marker_present and page.query(PRODUCT_TITLE_SELECTOR) is None

    def _primary_seller(self, page: BrowserPage) -> SellerRef | None:
        seller_link = page.query(SELLER_LINK_SELECTOR)
        if seller_link is not None:
            seller = SellerRef(
                seller_id=extract_seller_id(seller_link.attribute("href") or ""),
                display_name=seller_link.text().strip(),
                source=DiscoverySource.BUY_BOX,
            )
            self.log(f"  ✓ Buy box seller (3P): {seller.display_name} [{seller.seller_id}]")
            return seller

        merchant_info = page.query(MERCHANT_INFO_SELECTOR)
        if merchant_info is not None and PLATFORM_MARKER in merchant_info.text().lower():
            seller = SellerRef.platform()
            self.log(f"  ✓ Buy box seller: {seller.display_name}")
            return seller
        return None


class OfferListExtractor(StageExtractor):
    """
    Opens the all-offers panel and lists unique sellers, pinned offer first.
    """

    def extract(self, page: BrowserPage) -> list[SellerRef]:
        self.log("  → Opening all offers panel...")
        try:
            self._open_panel(page)
        except PanelError as exc:
            self.log(f"  ✗ AOD panel failed: {exc}")
            return []

        offers: list[PageElement] = []
        pinned = page.query(PINNED_OFFER_SELECTOR)
        if pinned is not None:
            offers.append(pinned)
        offers.extend(page.query_all(OFFER_SELECTOR))

        unique: dict[str, SellerRef] = {}
        for offer in offers:
            seller = self.parse_offer(offer)
            if seller is not None and seller.seller_id not in unique:
                unique[seller.seller_id] = seller

        sellers = list(unique.values())
        self.log(f"  ✓ {len(sellers)} unique sellers in AOD")
        for seller in sellers:
            self.log(f"    - {seller.display_name} [{seller.seller_id}]")

        self._close_panel(page)
        return sellers

    def _open_panel(self, page: BrowserPage) -> None:
        ingress_link = page.query(OFFERS_INGRESS_LINK_SELECTOR)
        if ingress_link is None:
            raise PanelError("AOD link not found")
        try:
            ingress_link.click()
            page.wait_for(OFFER_LIST_SELECTOR, timeout_seconds=self.settings.offers_timeout_seconds)
        except ScraperError as exc:
            raise PanelError(str(exc)) from exc
        self.pacer.pause(self.settings.offers_settle_seconds)

    @staticmethod
    def parse_offer(offer: PageElement) -> SellerRef | None:
        link = offer.query(OFFER_SELLER_LINK_SELECTOR)
        if link is None:
            return None
        seller_id = extract_seller_id(link.attribute("href") or "")
        if not seller_id:
            return None

        ships_from_node = offer.query(OFFER_SHIPS_FROM_SELECTOR)
        ships_from = ""
        if ships_from_node is not None:
            ships_from = _clean_inline(SHIPS_FROM_PREFIX_REGEX.sub("", ships_from_node.text()))

        price_node = offer.query(OFFER_PRICE_SELECTOR)
        price = price_node.text().strip() if price_node is not None else ""

        return SellerRef(
            seller_id=seller_id,
            display_name=link.text().strip(),
            source=DiscoverySource.OTHER_OFFERS,
            ships_from=ships_from,
            price=price,
        )

    def _close_panel(self, page: BrowserPage) -> None:
        try:
            close_button = page.query(PANEL_CLOSE_SELECTOR)
            if close_button is not None:
                close_button.click()
            self.pacer.pause(self.settings.panel_close_settle_seconds)
        except Exception as exc:
            logger.debug("Offers panel close ignored error=%s", exc)


class SellerProfileExtractor(StageExtractor):
    """
    Reads the seller profile page and maps its detail block to a profile.
    """

    def extract(self, page: BrowserPage, seller_id: str, target: Target) -> SellerProfile | None:
        url = target.marketplace.seller_profile_url(seller_id, target.identifier)
        self.log(f"    → Seller profile: {seller_id}")

        if not self._navigate(page, url, settle_seconds=self.settings.profile_settle_seconds):
            return None

        heading = page.query(PROFILE_NAME_SELECTOR)
        seller_name = heading.text().strip() if heading is not None else UNKNOWN_SELLER_NAME
        profile = build_profile(
            seller_name=seller_name,
            details_text=self._details_text(page),
            body_text=page.body_text(),
        )

        self.log(
            f"    ✓ {profile.seller_name or seller_id}: phone={profile.phone or '—'}, "
            f"email={profile.email or '—'}"
        )
        return profile

    @staticmethod
    def _details_text(page: BrowserPage) -> str | None:
        heading = next(
            (
                candidate
                for candidate in page.query_all(PROFILE_HEADING_SELECTOR)
                if any(text in candidate.text() for text in SELLER_DETAILS_HEADINGS)
            ),
            None,
        )
        if heading is None:
            return None

        for selector in PROFILE_CONTAINER_SELECTORS:
            container = heading.closest(selector)
            if container is not None:
                return container.text()

        parent = heading.parent()
        grandparent = parent.parent() if parent is not None else None
        return grandparent.text() if grandparent is not None else None
