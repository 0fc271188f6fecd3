"""
TCG Market Watch — Detail Model

The base name of a card, shared by every product (reprint, printing) that
carries the same TCGplayer cleanName.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Detail(Base):
    """Deduplicated card name. Unique across the table."""

    __tablename__ = "details"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(
        String, nullable=False, unique=True, comment="TCGplayer cleanName"
    )

    def __repr__(self) -> str:
        return f"<Detail id={self.id} name={self.name!r}>"
