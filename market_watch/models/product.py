"""
TCG Market Watch — Product Model

One TCGplayer product (a card within a set). Always belongs to one Detail;
the Group link is left empty when the upstream groupId is unknown locally.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True, comment="TCGplayer productId"
    )
    tcgplayer_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    detail_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("details.id"), nullable=False
    )
    group_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("groups.id"),
        nullable=True,
        comment="NULL when the upstream groupId did not match a stored group",
    )
    rarity_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rarities.id"), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<Product id={self.id} tcgplayer_id={self.tcgplayer_id} "
            f"detail_id={self.detail_id} group_id={self.group_id} rarity_id={self.rarity_id}>"
        )
