"""
TCG Market Watch — Product Reconciliation

Turns remote products into local rows:
- Details: one row per distinct cleanName, shared by every product carrying it
- Rarity: the free-text "Rarity" extended attribute resolved to a local row,
  with the bare "Common" alias and the "Unconfirmed" fallback
- Group: matched by TCGplayer groupId, left empty when unknown

Product rows are only built once the details exist and both sentinel
rarities have been found.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_watch.config import Settings
from market_watch.errors import SentinelRarityMissingError, StorageError
from market_watch.models import Detail, Group, Product, Rarity
from market_watch.pipeline.reference import persist_step
from market_watch.pipeline.tcgplayer import RemoteProduct

logger = structlog.get_logger(__name__)

# Label upstream uses inconsistently in place of the canonical common rarity
BARE_COMMON_LABEL = "Common"


# ---------------------------------------------------------------------------
# Details
# ---------------------------------------------------------------------------


def unique_detail_names(products: Iterable[RemoteProduct]) -> list[str]:
    """Distinct cleanName values, case-sensitive, in first-seen order."""
    seen: dict[str, None] = {}
    for product in products:
        seen.setdefault(product.clean_name, None)
    return list(seen)


def sync_details(
    session: Session,
    products: Sequence[RemoteProduct],
    batch_size: int = 1000,
    commit: bool = True,
) -> list[Detail]:
    """Persist one Detail per distinct cleanName and return them with ids."""
    rows = [Detail(name=name) for name in unique_detail_names(products)]
    return persist_step(session, rows, "details", batch_size=batch_size, commit=commit)


# ---------------------------------------------------------------------------
# Rarity
# ---------------------------------------------------------------------------


class RarityResolver:
    """
    Maps a product's rarity label to a local rarity id.

    Resolution order:
    1. no label → fallback ("Unconfirmed")
    2. label is exactly "Common" → canonical common ("Common / Short Print"),
       even when a rarity literally named "Common" is stored
    3. exact name match against the stored rarities (first match)
    4. no match → fallback
    """

    def __init__(self, rarities: Sequence[Rarity], fallback: Rarity, common: Rarity):
        self._fallback_id = fallback.id
        self._common_id = common.id
        self._by_name: dict[str, int] = {}
        for rarity in rarities:
            self._by_name.setdefault(rarity.name, rarity.id)

    def resolve(self, label: str | None, product_id: int | None = None) -> int:
        if label is None:
            logger.warning("rarity_missing", product_id=product_id)
            return self._fallback_id

        if label == BARE_COMMON_LABEL:
            return self._common_id

        rarity_id = self._by_name.get(label)
        if rarity_id is None:
            logger.debug("rarity_unmatched", product_id=product_id, label=label)
            return self._fallback_id
        return rarity_id


def find_sentinel_rarity(session: Session, name: str, create_missing: bool = False) -> Rarity:
    """
    Look up a sentinel rarity by exact name (lowest id wins).

    Raises:
        SentinelRarityMissingError: The row is absent and create_missing is off.
    """
    try:
        rarity = session.scalars(
            select(Rarity).where(Rarity.name == name).order_by(Rarity.id).limit(1)
        ).first()
        if rarity is None and create_missing:
            rarity = Rarity(name=name, tcgplayer_id=0)
            session.add(rarity)
            session.flush()
            logger.info("sentinel_rarity_created", name=name, rarity_id=rarity.id)
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"looking up rarity {name!r} failed: {e}") from e

    if rarity is None:
        logger.error("sentinel_rarity_missing", name=name)
        raise SentinelRarityMissingError(name)
    return rarity


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def sync_products(
    session: Session,
    groups: Sequence[Group],
    rarities: Sequence[Rarity],
    products: Sequence[RemoteProduct],
    settings: Settings,
    commit: bool = True,
) -> list[Product]:
    """
    Persist one Product per remote product, linked to its group, detail and rarity.

    Args:
        session: Open session.
        groups: Groups written by this sync.
        rarities: Rarities written by this sync.
        products: Every remote product of the category.
        settings: Sentinel names and batch sizes.
        commit: Commit each step; False leaves the transaction open.

    Returns:
        The persisted products, in the order of the remote list.
    """
    fallback = find_sentinel_rarity(
        session, settings.FALLBACK_RARITY_NAME, settings.CREATE_MISSING_SENTINELS
    )
    common = find_sentinel_rarity(
        session, settings.COMMON_RARITY_NAME, settings.CREATE_MISSING_SENTINELS
    )
    details = sync_details(session, products, settings.DETAIL_BATCH_SIZE, commit=commit)

    resolver = RarityResolver(rarities, fallback=fallback, common=common)

    group_ids: dict[int, int] = {}
    for group in groups:
        group_ids.setdefault(group.tcgplayer_id, group.id)
    detail_ids = {d.name: d.id for d in details}

    rows: list[Product] = []
    unmatched_groups = 0
    for remote in products:
        group_id = group_ids.get(remote.group_id)
        if group_id is None:
            unmatched_groups += 1
            logger.debug("product_group_unmatched", product_id=remote.id, group_id=remote.group_id)

        rows.append(
            Product(
                tcgplayer_id=remote.id,
                tcgplayer_url=remote.url,
                image_url=remote.image_url,
                detail_id=detail_ids[remote.clean_name],
                group_id=group_id,
                rarity_id=resolver.resolve(remote.rarity_label, product_id=remote.id),
            )
        )

    if unmatched_groups:
        logger.warning("products_without_group", count=unmatched_groups)

    return persist_step(
        session, rows, "products", batch_size=settings.PRODUCT_BATCH_SIZE, commit=commit
    )
