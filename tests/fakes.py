"""
Test doubles and payload builders shared across the test suite.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from market_watch.models import Rarity
from market_watch.pipeline.tcgplayer import (
    ExtendedData,
    RemoteCondition,
    RemoteGroup,
    RemoteLanguage,
    RemotePrinting,
    RemoteProduct,
    RemoteRarity,
    RemoteSKU,
    RemoteSKUPrice,
)


def seed_sentinels(session: Session) -> tuple[Rarity, Rarity]:
    """Store the "Unconfirmed" and "Common / Short Print" rarities."""
    fallback = Rarity(name="Unconfirmed", tcgplayer_id=900)
    common = Rarity(name="Common / Short Print", tcgplayer_id=901)
    session.add_all([fallback, common])
    session.commit()
    return fallback, common


# ---------------------------------------------------------------------------
# Remote payload builders
# ---------------------------------------------------------------------------


def make_sku(
    sku_id: int,
    product_id: int,
    language_id: int = 1,
    printing_id: int = 1,
    condition_id: int = 1,
) -> RemoteSKU:
    return RemoteSKU(
        id=sku_id,
        product_id=product_id,
        language_id=language_id,
        printing_id=printing_id,
        condition_id=condition_id,
    )


def make_product(
    product_id: int,
    clean_name: str,
    group_id: int = 1,
    rarity: str | None = None,
    skus: Sequence[RemoteSKU] = (),
) -> RemoteProduct:
    extended = [ExtendedData(name="Rarity", value=rarity)] if rarity is not None else []
    return RemoteProduct(
        id=product_id,
        name=clean_name,
        clean_name=clean_name,
        image_url=f"https://img.example/{product_id}.jpg",
        url=f"https://www.tcgplayer.com/product/{product_id}",
        group_id=group_id,
        extended_data=extended,
        skus=list(skus),
    )


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


class FakeTCGPlayer:
    """
    In-memory TCGplayer capability set.

    Paginated endpoints slice their lists by (offset, limit). Every call is
    recorded in .calls as (method, args). Put an exception in .fail_on[method]
    to make that method raise.
    """

    def __init__(
        self,
        groups: Sequence[RemoteGroup] = (),
        rarities: Sequence[RemoteRarity] = (),
        printings: Sequence[RemotePrinting] = (),
        conditions: Sequence[RemoteCondition] = (),
        languages: Sequence[RemoteLanguage] = (),
        products: Sequence[RemoteProduct] = (),
        prices: dict[int, tuple[float | None, float | None]] | None = None,
    ):
        self.groups = list(groups)
        self.rarities = list(rarities)
        self.printings = list(printings)
        self.conditions = list(conditions)
        self.languages = list(languages)
        self.products = list(products)
        self.prices = prices or {}
        self.calls: list[tuple[str, tuple]] = []
        self.fail_on: dict[str, Exception] = {}

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, args))
        if method in self.fail_on:
            raise self.fail_on[method]

    def called(self, method: str) -> list[tuple]:
        return [args for name, args in self.calls if name == method]

    def list_groups(self, category_id: int, limit: int, offset: int) -> list[RemoteGroup]:
        self._record("list_groups", category_id, limit, offset)
        return self.groups[offset:offset + limit]

    def list_rarities(self, category_id: int) -> list[RemoteRarity]:
        self._record("list_rarities", category_id)
        return list(self.rarities)

    def list_printings(self, category_id: int) -> list[RemotePrinting]:
        self._record("list_printings", category_id)
        return list(self.printings)

    def list_conditions(self, category_id: int) -> list[RemoteCondition]:
        self._record("list_conditions", category_id)
        return list(self.conditions)

    def list_languages(self, category_id: int) -> list[RemoteLanguage]:
        self._record("list_languages", category_id)
        return list(self.languages)

    def list_products(self, category_id: int, limit: int, offset: int) -> list[RemoteProduct]:
        self._record("list_products", category_id, limit, offset)
        return self.products[offset:offset + limit]

    def list_product_skus(self, product_id: int) -> list[RemoteSKU]:
        self._record("list_product_skus", product_id)
        for product in self.products:
            if product.id == product_id:
                return list(product.skus)
        return []

    def list_sku_prices(self, sku_ids: Sequence[int]) -> list[RemoteSKUPrice]:
        self._record("list_sku_prices", list(sku_ids))
        records = []
        for sku_id in sku_ids:
            price, shipping = self.prices.get(sku_id, (1.0, 0.5))
            records.append(RemoteSKUPrice(sku_id=sku_id, low_price=price, lowest_shipping=shipping))
        return records


def scenario() -> FakeTCGPlayer:
    """
    One of everything: group "Set A", rarity "Common", one printing,
    Near Mint, English, and product "Card X" labelled "Common" with one SKU.
    """
    return FakeTCGPlayer(
        groups=[RemoteGroup(id=1, name="Set A")],
        rarities=[RemoteRarity(id=1, name="Common")],
        printings=[RemotePrinting(id=1, name="1st Edition")],
        conditions=[RemoteCondition(id=1, name="Near Mint", abbreviation="NM")],
        languages=[RemoteLanguage(id=1, name="English")],
        products=[
            make_product(1, "Card X", group_id=1, rarity="Common", skus=[make_sku(1, 1)]),
        ],
    )
