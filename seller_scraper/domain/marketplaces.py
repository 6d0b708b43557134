"""
seller_scraper/domain/marketplaces.py

Regional storefront registry and target expansion.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class Marketplace:
    """
    One regional storefront of the platform.
    """

    code: str
    domain: str

    def product_url(self, identifier: str) -> str:
        return f"https://www.{self.domain}/dp/{identifier}"

    def seller_profile_url(self, seller_id: str, identifier: str) -> str:
        return f"https://www.{self.domain}/sp?seller={seller_id}&asin={identifier}"


@dataclass(frozen=True)
class Target:
    """
    One (product identifier, marketplace) unit of work.
    """

    identifier: str
    marketplace: Marketplace


ALL_MARKETPLACES: tuple[Marketplace, ...] = (
    Marketplace(code="UK", domain="amazon.co.uk"),
    Marketplace(code="IE", domain="amazon.ie"),
    Marketplace(code="DE", domain="amazon.de"),
    Marketplace(code="NL", domain="amazon.nl"),
    Marketplace(code="SE", domain="amazon.se"),
    Marketplace(code="BE", domain="amazon.com.be"),
    Marketplace(code="PL", domain="amazon.pl"),
    Marketplace(code="ES", domain="amazon.es"),
    Marketplace(code="IT", domain="amazon.it"),
    Marketplace(code="AE", domain="amazon.ae"),
    Marketplace(code="JP", domain="amazon.co.jp"),
    Marketplace(code="SA", domain="amazon.sa"),
    Marketplace(code="TR", domain="amazon.com.tr"),
)


def select_marketplaces(codes: Sequence[str] | None) -> list[Marketplace]:
    """
    Filter the registry by code, keeping registry order.

    An empty or missing filter selects every marketplace. Unknown codes are
    ignored.
    """

    if not codes:
        return list(ALL_MARKETPLACES)

    normalized = {code.strip().upper() for code in codes if code and code.strip()}
    if not normalized:
        return list(ALL_MARKETPLACES)
    return [marketplace for marketplace in ALL_MARKETPLACES if marketplace.code in normalized]


def cap_identifiers(identifiers: Sequence[str], max_count: int | None) -> list[str]:
    """
    Apply the optional identifier cap; zero or None means no cap.
    """

    cleaned = [item.strip() for item in identifiers if item and item.strip()]
    if max_count and max_count > 0:
        return cleaned[:max_count]
    return cleaned


def build_targets(
    identifiers: Sequence[str],
    marketplaces: Sequence[Marketplace],
) -> list[Target]:
    """
    Expand identifiers x marketplaces, identifier-major, in input order.
    """

    return [
        Target(identifier=identifier, marketplace=marketplace)
        for identifier in identifiers
        for marketplace in marketplaces
    ]
