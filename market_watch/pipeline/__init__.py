"""TCG Market Watch — Catalog sync and price ingest pipelines."""

from market_watch.pipeline.catalog import CatalogSyncResult, sync_catalog
from market_watch.pipeline.prices import ingest_prices
from market_watch.pipeline.tcgplayer import TCGPlayerAPI, TCGPlayerClient

__all__ = [
    "CatalogSyncResult",
    "TCGPlayerAPI",
    "TCGPlayerClient",
    "ingest_prices",
    "sync_catalog",
]
