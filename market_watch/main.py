"""
TCG Market Watch — Application Entrypoint

Configures structlog, opens the database and the TCGplayer client, then runs
either the catalog sync or the price ingest.

Run via:
    python -m market_watch.main                       # catalog sync
    python -m market_watch.main --ingest-price        # price ingest
    market-watch --category-id 2 --db-host db.local
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Sequence

import structlog
from pydantic import ValidationError
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.orm import Session, sessionmaker

from market_watch.config import Settings
from market_watch.pipeline.catalog import sync_catalog
from market_watch.pipeline.prices import ingest_prices
from market_watch.pipeline.tcgplayer import TCGPlayerClient


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper())

    # stdlib logging for third-party libraries (httpx, sqlalchemy)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Database Setup
# ---------------------------------------------------------------------------


def create_db_engine(settings: Settings) -> tuple[Engine, sessionmaker[Session]]:
    """
    Create the SQLAlchemy engine and session factory.

    One connection is enough: the pipelines are single-threaded and use one
    session for the whole run.

    Returns:
        (engine, session_factory) tuple.
    """
    logger = structlog.get_logger(__name__)
    logger.info("database_engine_initializing", host=settings.DB_HOST, database=settings.DB_NAME)

    engine = create_engine(
        settings.database_url,
        echo=False,
        pool_size=1,
        max_overflow=0,
        pool_pre_ping=True,
    )
    session_factory = sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )

    logger.info("database_engine_ready")
    return engine, session_factory


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="market-watch",
        description="Sync the TCGplayer catalog or ingest current SKU prices.",
    )
    parser.add_argument("--db-host", help="Database host.")
    parser.add_argument("--db-port", type=int, help="Database port.")
    parser.add_argument("--db-user", help="Database user.")
    parser.add_argument("--db-password", help="Database password.")
    parser.add_argument("--db-name", help="Database name.")
    parser.add_argument("--public-key", help="TCGplayer public API key.")
    parser.add_argument("--private-key", help="TCGplayer private API key.")
    parser.add_argument("--category-id", type=int, help="TCGplayer category (default: 2, Yu-Gi-Oh!).")
    parser.add_argument(
        "--ingest-price",
        action="store_true",
        default=None,
        help="Only ingest prices for known SKUs instead of syncing the catalog.",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR.")
    return parser.parse_args(argv)


_ARG_TO_SETTING = {
    "db_host": "DB_HOST",
    "db_port": "DB_PORT",
    "db_user": "DB_USER",
    "db_password": "DB_PASSWORD",
    "db_name": "DB_NAME",
    "public_key": "TCGPLAYER_PUBLIC_KEY",
    "private_key": "TCGPLAYER_PRIVATE_KEY",
    "category_id": "CATEGORY_ID",
    "ingest_price": "INGEST_PRICE",
    "log_level": "LOG_LEVEL",
}


def build_settings(args: argparse.Namespace) -> Settings:
    """Environment settings with every flag given on the command line applied on top."""
    overrides: dict[str, Any] = {
        setting: getattr(args, arg)
        for arg, setting in _ARG_TO_SETTING.items()
        if getattr(args, arg) is not None
    }
    return Settings(**overrides)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def run(settings: Settings) -> None:
    """
    Execute one run in the configured mode.

    Execution order:
    1. Create database engine and session factory
    2. Verify database connection (health check)
    3. Open the TCGplayer client
    4. Catalog sync or price ingest
    """
    logger = structlog.get_logger(__name__)

    if not settings.TCGPLAYER_PUBLIC_KEY or not settings.TCGPLAYER_PRIVATE_KEY:
        logger.warning("config_tcgplayer_keys_missing", note="token request will be rejected")

    engine, session_factory = create_db_engine(settings)
    try:
        with session_factory() as session:
            session.execute(text("SELECT 1"))
            logger.info("database_health_check_passed")

            with TCGPlayerClient.from_settings(settings) as client:
                if settings.INGEST_PRICE:
                    ingest_prices(session, client, settings)
                else:
                    sync_catalog(session, client, settings)
    finally:
        engine.dispose()


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry. Returns the process exit status."""
    args = parse_args(argv)
    try:
        settings = build_settings(args)
    except ValidationError as e:
        print(f"invalid configuration: {e}", file=sys.stderr)
        return 1

    _configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    mode = "price_ingest" if settings.INGEST_PRICE else "catalog_sync"
    logger.info("market_watch_startup", mode=mode, category_id=settings.CATEGORY_ID)

    try:
        run(settings)
    except KeyboardInterrupt:
        logger.info("market_watch_interrupted_by_user")
        return 130
    except Exception as e:
        logger.error("market_watch_fatal_error", error=str(e), error_type=type(e).__name__)
        print(e, file=sys.stderr)
        return 1

    logger.info("market_watch_complete", mode=mode)
    return 0


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    sys.exit(main())
