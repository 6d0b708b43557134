"""
Ordered, seller-id-unique queue of sellers to profile-visit.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence

from seller_scraper.domain.sellers import SellerRef


class SellerVisitSet:
    """
    Insertion-ordered merge of discovered sellers keyed by seller id.

    The first occurrence of an id wins. Sellers without an id (the platform
    itself) cannot be profile-visited and are never inserted.
    """

    def __init__(self) -> None:
        self._sellers: dict[str, SellerRef] = {}

    @classmethod
    def from_discovery(
        cls,
        primary_seller: SellerRef | None,
        offer_sellers: Sequence[SellerRef] = (),
    ) -> "SellerVisitSet":
        visit_set = cls()
        if primary_seller is not None:
            visit_set.add(primary_seller)
        visit_set.extend(offer_sellers)
        return visit_set

    def add(self, seller: SellerRef) -> bool:
        if not seller.seller_id or seller.seller_id in self._sellers:
            return False
        self._sellers[seller.seller_id] = seller
        return True

    def extend(self, sellers: Iterable[SellerRef]) -> None:
        for seller in sellers:
            self.add(seller)

    def is_platform_only(self, primary_seller: SellerRef | None) -> bool:
        """
        True when nothing is visitable and the buy box belongs to the platform.
        """

        return not self._sellers and primary_seller is not None and primary_seller.is_platform

    def seller_ids(self) -> list[str]:
        return list(self._sellers)

    def __iter__(self) -> Iterator[SellerRef]:
        return iter(list(self._sellers.values()))

    def __len__(self) -> int:
        return len(self._sellers)
