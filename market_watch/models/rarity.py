"""
TCG Market Watch — Rarity Model

Besides the upstream rarities, two sentinel rows are relied on by product
reconciliation: "Unconfirmed" (fallback) and "Common / Short Print"
(target for the bare "Common" label).
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Rarity(Base):
    """A TCGplayer rarity, keyed locally by id and matched by display name."""

    __tablename__ = "rarities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String, nullable=False, index=True, comment="Rarity display text (e.g. 'Ultra Rare')"
    )
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="TCGplayer rarityId"
    )

    def __repr__(self) -> str:
        return f"<Rarity id={self.id} name={self.name!r}>"
