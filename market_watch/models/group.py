"""
TCG Market Watch — Group Model

A release/set (e.g. a Yu-Gi-Oh! expansion). Written once per catalog sync and
only ever replaced by a full catalog rebuild.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Group(Base):
    """A TCGplayer group (set / release)."""

    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, index=True, comment="TCGplayer groupId"
    )

    def __repr__(self) -> str:
        return f"<Group id={self.id} tcgplayer_id={self.tcgplayer_id} name={self.name!r}>"
