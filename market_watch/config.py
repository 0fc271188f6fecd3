"""
TCG Market Watch — Configuration & Constants

Every batch size, delay and sentinel name lives here. No hardcoded values
in pipeline logic. A Settings instance is built once by the entrypoint and
passed explicitly into each pipeline function.

Usage:
    from market_watch.config import Settings
    settings = Settings()
"""

from __future__ import annotations

from enum import Enum

from pydantic import field_validator
from pydantic_settings import BaseSettings


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ResetTrigger(str, Enum):
    """Comparison used to decide whether the stored catalog must be rebuilt."""
    OVERLAP = "overlap"        # any stored group id is still listed upstream
    DIVERGENCE = "divergence"  # stored and upstream group id sets differ


class Category(int, Enum):
    """TCGplayer category identifiers."""
    MAGIC = 1
    YUGIOH = 2
    POKEMON = 3


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """
    Central configuration for TCG Market Watch.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # -----------------------------------------------------------------------
    # Database
    # -----------------------------------------------------------------------
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = "password"
    DB_NAME: str = "tcg-market-watch-api"
    DATABASE_URL: str = ""                  # Overrides the DB_* parts when set

    # -----------------------------------------------------------------------
    # TCGplayer API
    # -----------------------------------------------------------------------
    TCGPLAYER_PUBLIC_KEY: str = ""
    TCGPLAYER_PRIVATE_KEY: str = ""
    TCGPLAYER_BASE_URL: str = "https://api.tcgplayer.com"
    TCGPLAYER_API_VERSION: str = "v1.39.0"
    CATEGORY_ID: int = Category.YUGIOH.value

    # -----------------------------------------------------------------------
    # Mode
    # -----------------------------------------------------------------------
    INGEST_PRICE: bool = False              # True → price ingest, False → catalog sync

    # -----------------------------------------------------------------------
    # Paging & batching
    # -----------------------------------------------------------------------
    PAGE_LIMIT: int = 100
    PRODUCT_PAGE_DELAY_SECONDS: float = 0.2
    PRICE_BATCH_SIZE: int = 100
    PRICE_BATCH_DELAY_SECONDS: float = 0.1
    DETAIL_BATCH_SIZE: int = 1000
    PRODUCT_BATCH_SIZE: int = 1000
    SKU_BATCH_SIZE: int = 3000

    # -----------------------------------------------------------------------
    # Catalog reconciliation
    # -----------------------------------------------------------------------
    ENGLISH_LANGUAGE_ID: int = 1            # TCGplayer languageId for English
    FALLBACK_RARITY_NAME: str = "Unconfirmed"
    # Upstream emits bare "Common" for what is listed as this rarity
    COMMON_RARITY_NAME: str = "Common / Short Print"
    CREATE_MISSING_SENTINELS: bool = False
    RESET_TRIGGER: ResetTrigger = ResetTrigger.OVERLAP
    SYNC_SINGLE_TRANSACTION: bool = False

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"                 # DEBUG, INFO, WARNING or ERROR

    @field_validator("LOG_LEVEL")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {v!r}")
        return level

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL, built from DB_* parts unless DATABASE_URL is set."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )
