"""TCG Market Watch — Condition Model (e.g. "Near Mint" / "NM")."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Condition(Base):
    __tablename__ = "conditions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    abbreviation: Mapped[str] = mapped_column(
        String, nullable=False, default="", comment="Short grade code (e.g. 'NM')"
    )
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="TCGplayer conditionId"
    )

    def __repr__(self) -> str:
        return f"<Condition id={self.id} name={self.name!r} abbr={self.abbreviation!r}>"
