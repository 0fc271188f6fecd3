"""
TCG Market Watch — Language Model

English is TCGplayer languageId 1; SKUs in any other language are never
stored.
"""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from market_watch.models.base import Base


class Language(Base):
    __tablename__ = "languages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    tcgplayer_id: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="TCGplayer languageId"
    )

    def __repr__(self) -> str:
        return f"<Language id={self.id} name={self.name!r}>"
