"""
Domain package exports.
"""

from seller_scraper.domain.marketplaces import (
    ALL_MARKETPLACES,
    Marketplace,
    Target,
    build_targets,
    cap_identifiers,
    select_marketplaces,
)
from seller_scraper.domain.runs import Run, RunInput, RunSnapshot, RunStatus
from seller_scraper.domain.sellers import (
    PLATFORM_SELLER_NAME,
    DiscoverySource,
    OutputRow,
    ProductPageResult,
    RowSource,
    SellerProfile,
    SellerRef,
)

__all__ = [
    "ALL_MARKETPLACES",
    "DiscoverySource",
    "Marketplace",
    "OutputRow",
    "PLATFORM_SELLER_NAME",
    "ProductPageResult",
    "RowSource",
    "Run",
    "RunInput",
    "RunSnapshot",
    "RunStatus",
    "SellerProfile",
    "SellerRef",
    "Target",
    "build_targets",
    "cap_identifiers",
    "select_marketplaces",
]
