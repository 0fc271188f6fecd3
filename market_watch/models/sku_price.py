"""
TCG Market Watch — SKU Price Model

Append-only log of price snapshots per SKU.
Never updated — each price ingest run appends one row per SKU.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import REAL, TIMESTAMP, ForeignKey, Index, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class SKUPrice(Base):
    """
    Price snapshot for one SKU.

    Price and shipping are single-precision floats as reported by the
    TCGplayer pricing endpoint (lowPrice, lowestShipping).

    Index: (sku_id, created_at) supports per-SKU range scans.
    """

    __tablename__ = "sku_prices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("skus.id"), nullable=False, comment="FK to skus.id"
    )
    price: Mapped[float | None] = mapped_column(
        REAL, nullable=True, comment="Lowest listing price (USD)"
    )
    shipping: Mapped[float | None] = mapped_column(
        REAL, nullable=True, comment="Lowest shipping cost (USD)"
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="UTC timestamp of ingestion",
    )

    __table_args__ = (
        Index("ix_sku_prices_sku_created", "sku_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<SKUPrice sku_id={self.sku_id} price={self.price} "
            f"shipping={self.shipping} at={self.created_at}>"
        )
