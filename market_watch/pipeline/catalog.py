"""
TCG Market Watch — Catalog Sync Pipeline

Orchestrates the "immutable data" sync:

    groups → reset decision → [truncate] → groups, rarities, printings,
    conditions, languages → products (details, rarity resolution) → SKUs

Every step commits on its own unless SYNC_SINGLE_TRANSACTION is set, in
which case the whole rebuild, truncate included, is committed once at the
end and rolled back on any failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_watch.config import Settings
from market_watch.errors import StorageError
from market_watch.pipeline.pagination import fetch_all_pages
from market_watch.pipeline.products import sync_products
from market_watch.pipeline.reference import (
    sync_conditions,
    sync_groups,
    sync_languages,
    sync_printings,
    sync_rarities,
)
from market_watch.pipeline.reset import (
    ResetDecision,
    decide_reset,
    load_local_group_ids,
    truncate_catalog,
)
from market_watch.pipeline.skus import sync_skus
from market_watch.pipeline.tcgplayer import RemoteGroup, RemoteProduct, TCGPlayerAPI

logger = structlog.get_logger(__name__)


@dataclass
class CatalogSyncResult:
    """Outcome of one catalog sync run."""
    decision: ResetDecision
    counts: dict[str, int] = field(default_factory=dict)


def fetch_groups(client: TCGPlayerAPI, settings: Settings) -> list[RemoteGroup]:
    return fetch_all_pages(
        lambda offset, limit: client.list_groups(settings.CATEGORY_ID, limit, offset),
        limit=settings.PAGE_LIMIT,
        label="groups",
    )


def fetch_products(client: TCGPlayerAPI, settings: Settings) -> list[RemoteProduct]:
    return fetch_all_pages(
        lambda offset, limit: client.list_products(settings.CATEGORY_ID, limit, offset),
        limit=settings.PAGE_LIMIT,
        delay_seconds=settings.PRODUCT_PAGE_DELAY_SECONDS,
        label="products",
    )


def sync_catalog(session: Session, client: TCGPlayerAPI, settings: Settings) -> CatalogSyncResult:
    """
    Run the catalog sync for settings.CATEGORY_ID.

    Raises:
        UpstreamError: A TCGplayer call failed.
        StorageError: A database step failed.
    """
    category_id = settings.CATEGORY_ID
    commit = not settings.SYNC_SINGLE_TRANSACTION

    logger.info(
        "catalog_sync_start",
        category_id=category_id,
        reset_trigger=settings.RESET_TRIGGER.value,
        single_transaction=settings.SYNC_SINGLE_TRANSACTION,
    )

    groups = fetch_groups(client, settings)
    local_ids = load_local_group_ids(session)
    decision = decide_reset(local_ids, groups, settings.RESET_TRIGGER)

    logger.info(
        "catalog_reset_decided",
        decision=decision.value,
        local_groups=len(local_ids),
        remote_groups=len(groups),
    )

    if decision is ResetDecision.SKIP:
        logger.info("catalog_already_exists")
        return CatalogSyncResult(decision=decision)

    try:
        if decision is ResetDecision.RESET:
            truncate_catalog(session, commit=commit)

        created_groups = sync_groups(session, groups, commit=commit)
        created_rarities = sync_rarities(session, client.list_rarities(category_id), commit=commit)
        created_printings = sync_printings(session, client.list_printings(category_id), commit=commit)
        created_conditions = sync_conditions(session, client.list_conditions(category_id), commit=commit)
        created_languages = sync_languages(session, client.list_languages(category_id), commit=commit)

        remote_products = fetch_products(client, settings)
        created_products = sync_products(
            session, created_groups, created_rarities, remote_products, settings, commit=commit
        )
        created_skus = sync_skus(
            session,
            created_languages,
            created_conditions,
            created_printings,
            created_products,
            remote_products,
            settings,
            commit=commit,
        )

        if not commit:
            session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StorageError(f"committing catalog sync failed: {e}") from e
    except Exception:
        if not commit:
            session.rollback()
        raise

    result = CatalogSyncResult(
        decision=decision,
        counts={
            "groups": len(created_groups),
            "rarities": len(created_rarities),
            "printings": len(created_printings),
            "conditions": len(created_conditions),
            "languages": len(created_languages),
            "details": len({p.detail_id for p in created_products}),
            "products": len(created_products),
            "skus": len(created_skus),
        },
    )
    logger.info("catalog_sync_complete", decision=decision.value, **result.counts)
    return result
