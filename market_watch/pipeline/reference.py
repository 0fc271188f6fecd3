"""
TCG Market Watch — Reference-Table Syncer

Copies the small per-category reference lists (groups, rarities, printings,
conditions, languages) into their local tables. Each kind is written in one
bulk insert and the persisted rows, with their local ids, are returned for
the product and SKU joins.
"""

from __future__ import annotations

from typing import Sequence, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_watch.errors import StorageError
from market_watch.models import Condition, Group, Language, Printing, Rarity
from market_watch.pipeline.tcgplayer import (
    RemoteCondition,
    RemoteGroup,
    RemoteLanguage,
    RemotePrinting,
    RemoteRarity,
)

logger = structlog.get_logger(__name__)

M = TypeVar("M")


def bulk_insert(session: Session, rows: list[M], batch_size: int | None = None) -> list[M]:
    """
    Add rows to the session and flush so the database assigns their ids.

    Args:
        session: Open session; the caller decides when to commit.
        rows: Unsaved model instances.
        batch_size: Max rows per flush. None flushes everything at once.

    Returns:
        The same rows, ids populated.
    """
    if not rows:
        return rows
    step = batch_size or len(rows)
    for start in range(0, len(rows), step):
        session.add_all(rows[start:start + step])
        session.flush()
    return rows


def persist_step(
    session: Session,
    rows: list[M],
    table: str,
    batch_size: int | None = None,
    commit: bool = True,
) -> list[M]:
    """
    Write one sync step all-or-nothing.

    On failure the session is rolled back and the error re-raised as
    StorageError. With commit=False the rows are only flushed, leaving the
    enclosing transaction open.
    """
    try:
        bulk_insert(session, rows, batch_size)
        if commit:
            session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("sync_step_failed", table=table, error=str(e), error_type=type(e).__name__)
        raise StorageError(f"inserting {table} failed: {e}") from e

    logger.info("sync_step_stored", table=table, count=len(rows))
    return rows


def sync_groups(session: Session, groups: Sequence[RemoteGroup], commit: bool = True) -> list[Group]:
    rows = [Group(name=g.name, tcgplayer_id=g.id) for g in groups]
    return persist_step(session, rows, "groups", commit=commit)


def sync_rarities(session: Session, rarities: Sequence[RemoteRarity], commit: bool = True) -> list[Rarity]:
    rows = [Rarity(name=r.name, tcgplayer_id=r.id) for r in rarities]
    return persist_step(session, rows, "rarities", commit=commit)


def sync_printings(session: Session, printings: Sequence[RemotePrinting], commit: bool = True) -> list[Printing]:
    rows = [Printing(name=p.name, tcgplayer_id=p.id) for p in printings]
    return persist_step(session, rows, "printings", commit=commit)


def sync_conditions(session: Session, conditions: Sequence[RemoteCondition], commit: bool = True) -> list[Condition]:
    rows = [
        Condition(name=c.name, abbreviation=c.abbreviation, tcgplayer_id=c.id)
        for c in conditions
    ]
    return persist_step(session, rows, "conditions", commit=commit)


def sync_languages(session: Session, languages: Sequence[RemoteLanguage], commit: bool = True) -> list[Language]:
    rows = [Language(name=lang.name, tcgplayer_id=lang.id) for lang in languages]
    return persist_step(session, rows, "languages", commit=commit)
