"""TCG Market Watch — Printing Model (e.g. "1st Edition", "Unlimited")."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Printing(Base):
    __tablename__ = "printings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="TCGplayer printingId"
    )

    def __repr__(self) -> str:
        return f"<Printing id={self.id} name={self.name!r}>"
