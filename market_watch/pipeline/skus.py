"""
TCG Market Watch — SKU Syncer

Joins every nested remote SKU onto the local product, printing, condition
and language rows. Only English SKUs are kept; language varies per SKU, so
the filter is applied to each SKU rather than to each product.
"""

from __future__ import annotations

from typing import Protocol, Sequence

import structlog
from sqlalchemy.orm import Session

from market_watch.config import Settings
from market_watch.models import SKU, Condition, Language, Printing, Product
from market_watch.pipeline.reference import persist_step
from market_watch.pipeline.tcgplayer import RemoteProduct

logger = structlog.get_logger(__name__)


class _HasRemoteID(Protocol):
    id: int
    tcgplayer_id: int


def index_by_remote_id(rows: Sequence[_HasRemoteID]) -> dict[int, int]:
    """Map TCGplayer id → local id. The first row wins on duplicate remote ids."""
    index: dict[int, int] = {}
    for row in rows:
        index.setdefault(row.tcgplayer_id, row.id)
    return index


def sync_skus(
    session: Session,
    languages: Sequence[Language],
    conditions: Sequence[Condition],
    printings: Sequence[Printing],
    products: Sequence[Product],
    remote_products: Sequence[RemoteProduct],
    settings: Settings,
    commit: bool = True,
) -> list[SKU]:
    """
    Persist the English SKUs of every remote product.

    A SKU whose language is unknown locally, or known but not English, is
    dropped. Other unresolved links are stored as NULL.

    Returns:
        The persisted SKUs.
    """
    product_ids = index_by_remote_id(products)
    printing_ids = index_by_remote_id(printings)
    condition_ids = index_by_remote_id(conditions)
    language_ids = index_by_remote_id(languages)

    english_id = language_ids.get(settings.ENGLISH_LANGUAGE_ID)
    if english_id is None:
        logger.warning("english_language_missing", tcgplayer_id=settings.ENGLISH_LANGUAGE_ID)

    rows: list[SKU] = []
    skipped = 0
    for remote_product in remote_products:
        for remote_sku in remote_product.skus:
            if remote_sku.language_id != settings.ENGLISH_LANGUAGE_ID or english_id is None:
                skipped += 1
                continue

            rows.append(
                SKU(
                    tcgplayer_id=remote_sku.id,
                    product_id=product_ids.get(remote_sku.product_id),
                    printing_id=printing_ids.get(remote_sku.printing_id),
                    condition_id=condition_ids.get(remote_sku.condition_id),
                    language_id=english_id,
                )
            )

    logger.info("skus_filtered", kept=len(rows), skipped_non_english=skipped)
    return persist_step(session, rows, "skus", batch_size=settings.SKU_BATCH_SIZE, commit=commit)
