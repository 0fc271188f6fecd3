"""
TCG Market Watch — SKU Model

A purchasable variant: Product × Printing × Condition × Language.
Only English SKUs are stored.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class SKU(Base):
    __tablename__ = "skus"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True, comment="TCGplayer skuId"
    )
    product_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("products.id"), nullable=True
    )
    printing_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("printings.id"), nullable=True
    )
    condition_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("conditions.id"), nullable=True
    )
    language_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("languages.id"), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<SKU id={self.id} tcgplayer_id={self.tcgplayer_id} product_id={self.product_id} "
            f"printing_id={self.printing_id} condition_id={self.condition_id} "
            f"language_id={self.language_id}>"
        )
