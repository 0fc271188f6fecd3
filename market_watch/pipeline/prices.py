"""
TCG Market Watch — Price Ingestor

Appends one SKUPrice row per stored SKU per run. SKU ids are sent to the
pricing endpoint in fixed-size batches with a pause between batches to stay
under the TCGplayer rate limit.

A failing batch aborts the run; batches already committed are kept.
"""

from __future__ import annotations

import struct
import time
from typing import Iterator, Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from market_watch.config import Settings
from market_watch.errors import StorageError
from market_watch.models import SKU, SKUPrice
from market_watch.pipeline.tcgplayer import RemoteSKUPrice, TCGPlayerAPI

logger = structlog.get_logger(__name__)


def to_float32(value: float | None) -> float | None:
    """Round a double to the nearest single-precision value."""
    if value is None:
        return None
    return struct.unpack("f", struct.pack("f", value))[0]


def batched(items: Sequence[int], size: int) -> Iterator[list[int]]:
    """Yield consecutive slices of at most size items; the last may be shorter."""
    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def load_sku_ids(session: Session) -> dict[int, list[int]]:
    """
    Map TCGplayer skuId → local sku ids for every stored SKU row.

    Rows sharing a remote id are all kept, so each of them gets a price row
    while the id is only requested once.
    """
    try:
        rows = session.execute(select(SKU.tcgplayer_id, SKU.id).order_by(SKU.id)).all()
    except SQLAlchemyError as e:
        raise StorageError(f"reading stored SKUs failed: {e}") from e

    sku_ids: dict[int, list[int]] = {}
    for tcgplayer_id, local_id in rows:
        sku_ids.setdefault(tcgplayer_id, []).append(local_id)
    return sku_ids


def build_price_rows(
    prices: Sequence[RemoteSKUPrice],
    sku_ids: dict[int, list[int]],
) -> list[SKUPrice]:
    rows: list[SKUPrice] = []
    for record in prices:
        local_ids = sku_ids.get(record.sku_id)
        if not local_ids:
            logger.warning("price_for_unknown_sku", sku_id=record.sku_id)
            continue
        price = to_float32(record.low_price)
        shipping = to_float32(record.lowest_shipping)
        rows.extend(SKUPrice(sku_id=local_id, price=price, shipping=shipping) for local_id in local_ids)
    return rows


def ingest_prices(
    session: Session,
    client: TCGPlayerAPI,
    settings: Settings,
    sleep_seconds: float | None = None,
) -> int:
    """
    Fetch and append current prices for every stored SKU.

    Args:
        session: Open session; each batch is committed separately.
        client: TCGplayer capability set.
        settings: Batch size and default inter-batch delay.
        sleep_seconds: Overrides settings.PRICE_BATCH_DELAY_SECONDS.

    Returns:
        Number of SKUPrice rows inserted.

    Raises:
        UpstreamError: A price lookup failed; later batches are not attempted.
        StorageError: A batch insert failed.
    """
    delay = settings.PRICE_BATCH_DELAY_SECONDS if sleep_seconds is None else sleep_seconds
    sku_ids = load_sku_ids(session)
    batches = list(batched(list(sku_ids), settings.PRICE_BATCH_SIZE))

    logger.info(
        "price_ingest_start",
        skus=sum(len(ids) for ids in sku_ids.values()),
        remote_ids=len(sku_ids),
        batches=len(batches),
    )

    inserted = 0
    for index, batch in enumerate(batches):
        if index > 0 and delay > 0:
            time.sleep(delay)

        prices = client.list_sku_prices(batch)
        rows = build_price_rows(prices, sku_ids)

        try:
            session.add_all(rows)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                "price_batch_failed",
                batch=index,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise StorageError(f"inserting prices for batch {index} failed: {e}") from e

        inserted += len(rows)
        logger.info("price_batch_stored", batch=index, requested=len(batch), stored=len(rows))

    logger.info("price_ingest_complete", inserted=inserted)
    return inserted
