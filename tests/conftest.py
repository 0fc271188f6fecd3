"""
TCG Market Watch — Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- In-memory SQLite engine and session (fresh per test)
- Settings with zero delays
- FakeTCGPlayer loaded with the one-of-everything scenario
"""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from market_watch.config import Settings
from market_watch.models import Base, Rarity
from tests.fakes import FakeTCGPlayer, scenario, seed_sentinels


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine with every table created.

    Creates a fresh database for each test, ensuring isolation.
    """
    engine = create_engine("sqlite://", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Generator[Session, None, None]:
    with Session(db_engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
def sentinels(db_session) -> tuple[Rarity, Rarity]:
    """(fallback, common) sentinel rarities, already committed."""
    return seed_sentinels(db_session)


# ---------------------------------------------------------------------------
# Configuration & Upstream
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    """Settings with no inter-page or inter-batch delays."""
    return Settings(
        DATABASE_URL="sqlite://",
        PRODUCT_PAGE_DELAY_SECONDS=0,
        PRICE_BATCH_DELAY_SECONDS=0,
    )


@pytest.fixture
def scenario_client() -> FakeTCGPlayer:
    return scenario()
