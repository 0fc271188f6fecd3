"""TCG Market Watch — TCGplayer catalog sync and price ingest."""

__version__ = "0.1.0"
