"""
TCG Market Watch — Catalog Reset Policy

Decides, from the stored and upstream group ids, whether a catalog sync
starts fresh, rebuilds everything, or does nothing.

Two comparisons are available (Settings.RESET_TRIGGER):
- overlap: rebuild when any stored group id is still listed upstream.
  This is the historical behavior; it fires on virtually every run against
  an unchanged catalog.
- divergence: rebuild when the stored and upstream id sets differ
  (a group was added or removed upstream).
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, Sequence

import structlog
from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_watch.config import ResetTrigger
from market_watch.errors import StorageError
from market_watch.models import (
    SKU,
    Condition,
    Detail,
    Group,
    Language,
    Printing,
    Product,
    Rarity,
    SKUPrice,
)
from market_watch.pipeline.tcgplayer import RemoteGroup

logger = structlog.get_logger(__name__)

TRUNCATE_CATALOG_SQL = (
    "TRUNCATE TABLE products, details, groups, rarities, conditions, languages, printings CASCADE"
)

# Children first, for dialects without TRUNCATE ... CASCADE
_DELETE_ORDER = (SKUPrice, SKU, Product, Detail, Group, Rarity, Condition, Language, Printing)


class ResetDecision(str, Enum):
    FRESH = "fresh"   # nothing stored yet, sync without truncating
    RESET = "reset"   # truncate the catalog, then sync
    SKIP = "skip"     # stored catalog is current


def groups_changed(
    local_ids: Iterable[int],
    remote_ids: Iterable[int],
    trigger: ResetTrigger,
) -> bool:
    local = set(local_ids)
    remote = set(remote_ids)
    if trigger is ResetTrigger.OVERLAP:
        return not local.isdisjoint(remote)
    return local != remote


def decide_reset(
    local_ids: Sequence[int],
    remote_groups: Sequence[RemoteGroup],
    trigger: ResetTrigger = ResetTrigger.OVERLAP,
) -> ResetDecision:
    """
    Args:
        local_ids: TCGplayer ids of the stored groups.
        remote_groups: Groups currently listed upstream.
        trigger: Comparison deciding whether the groups changed.
    """
    if not local_ids:
        return ResetDecision.FRESH
    if groups_changed(local_ids, (g.id for g in remote_groups), trigger):
        return ResetDecision.RESET
    return ResetDecision.SKIP


def load_local_group_ids(session: Session) -> list[int]:
    try:
        return list(session.scalars(select(Group.tcgplayer_id)))
    except SQLAlchemyError as e:
        raise StorageError(f"reading stored groups failed: {e}") from e


def truncate_catalog(session: Session, commit: bool = True) -> None:
    """
    Remove every catalog row, including SKUs and their price history.

    PostgreSQL gets a single TRUNCATE ... CASCADE, which leaves identity
    sequences running so local ids are not reused. Other dialects delete
    table by table, children first; SQLite may hand out freed ids again.
    """
    try:
        if session.get_bind().dialect.name == "postgresql":
            session.execute(text(TRUNCATE_CATALOG_SQL))
        else:
            for model in _DELETE_ORDER:
                session.execute(delete(model))
        if commit:
            session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("catalog_truncate_failed", error=str(e), error_type=type(e).__name__)
        raise StorageError(f"truncating catalog failed: {e}") from e

    logger.info("catalog_truncated")
