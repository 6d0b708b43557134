"""
seller_scraper/domain/sellers.py

Domain models for discovered sellers, seller profiles and output rows.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from seller_scraper.domain.marketplaces import Target

PLATFORM_SELLER_NAME = "Amazon"


class DiscoverySource(str, Enum):
    BUY_BOX = "buy_box"
    OTHER_OFFERS = "other_offers"


class RowSource(str, Enum):
    BUY_BOX = "buy_box"
    OTHER_OFFERS = "other_offers"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SellerRef:
    """
    A seller discovered on the product page or in the offers panel.

    `seller_id` is None only for the platform acting as the seller.
    """

    seller_id: str | None
    display_name: str
    source: DiscoverySource
    ships_from: str = ""
    price: str = ""

    @property
    def is_platform(self) -> bool:
        return self.seller_id is None and self.display_name == PLATFORM_SELLER_NAME

    @classmethod
    def platform(cls) -> "SellerRef":
        return cls(
            seller_id=None,
            display_name=PLATFORM_SELLER_NAME,
            source=DiscoverySource.BUY_BOX,
        )


@dataclass(frozen=True)
class ProductPageResult:
    """
    Outcome of the product-page stage.
    """

    primary_seller: SellerRef | None = None
    has_other_sellers: bool = False
    not_found: bool = False


@dataclass(frozen=True)
class SellerProfile:
    """
    Compliance data from a seller profile page. Missing fields are empty strings.
    """

    seller_name: str
    business_name: str = ""
    business_type: str = ""
    trade_register_number: str = ""
    vat_number: str = ""
    phone: str = ""
    email: str = ""
    business_address: str = ""
    customer_service_address: str = ""
    customer_service_phone: str = ""


@dataclass(frozen=True)
class OutputRow:
    """
    One result row per visited seller, or one placeholder row per target.
    """

    identifier: str
    marketplace_code: str
    domain: str
    source: RowSource
    seller_id: str = ""
    seller_display_name: str = ""
    seller_name: str = ""
    business_name: str = ""
    business_type: str = ""
    trade_register_number: str = ""
    vat_number: str = ""
    phone: str = ""
    email: str = ""
    business_address: str = ""
    customer_service_address: str = ""
    customer_service_phone: str = ""
    ships_from: str = ""
    price: str = ""
    error: str | None = None

    @classmethod
    def for_seller(
        cls,
        *,
        target: Target,
        seller: SellerRef,
        profile: SellerProfile | None,
    ) -> "OutputRow":
        profile_fields = asdict(profile) if profile is not None else {}
        profile_fields.pop("seller_name", None)
        return cls(
            identifier=target.identifier,
            marketplace_code=target.marketplace.code,
            domain=target.marketplace.domain,
            source=RowSource(seller.source.value),
            seller_id=seller.seller_id or "",
            seller_display_name=seller.display_name,
            seller_name=(profile.seller_name if profile else "") or seller.display_name,
            ships_from=seller.ships_from,
            price=seller.price,
            **{key: value or "" for key, value in profile_fields.items()},
        )

    @classmethod
    def placeholder(
        cls,
        *,
        target: Target,
        primary_seller: SellerRef | None,
        not_found: bool = False,
    ) -> "OutputRow":
        source = RowSource.BUY_BOX if primary_seller and not not_found else RowSource.NOT_FOUND
        name = primary_seller.display_name if primary_seller else "N/A"
        return cls(
            identifier=target.identifier,
            marketplace_code=target.marketplace.code,
            domain=target.marketplace.domain,
            source=source,
            seller_display_name=name,
            seller_name=name,
        )

    @classmethod
    def failure(cls, *, target: Target, message: str) -> "OutputRow":
        return cls(
            identifier=target.identifier,
            marketplace_code=target.marketplace.code,
            domain=target.marketplace.domain,
            source=RowSource.ERROR,
            error=message,
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize with the stable camelCase field set used by API consumers.
        """

        payload: dict[str, Any] = {
            "identifier": self.identifier,
            "marketplaceCode": self.marketplace_code,
            "domain": self.domain,
            "source": self.source.value,
            "sellerId": self.seller_id,
            "sellerDisplayName": self.seller_display_name,
            "sellerName": self.seller_name,
            "businessName": self.business_name,
            "businessType": self.business_type,
            "tradeRegisterNumber": self.trade_register_number,
            "vatNumber": self.vat_number,
            "phone": self.phone,
            "email": self.email,
            "businessAddress": self.business_address,
            "customerServiceAddress": self.customer_service_address,
            "customerServicePhone": self.customer_service_phone,
            "shipsFrom": self.ships_from,
            "price": self.price,
        }
        if self.source is RowSource.ERROR:
            payload["error"] = self.error or ""
        return payload
