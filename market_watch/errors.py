"""
TCG Market Watch — Exceptions

Upstream and storage failures are fatal to the running pipeline and
propagate to the entrypoint. Resolution misses never raise.
"""

from __future__ import annotations


class MarketWatchError(RuntimeError):
    """Base class for pipeline failures."""


class UpstreamError(MarketWatchError):
    """A TCGplayer API call failed (transport, HTTP status or error envelope)."""


class StorageError(MarketWatchError):
    """A database write or read failed during a sync step."""


class SentinelRarityMissingError(StorageError):
    """A sentinel rarity row ("Unconfirmed", "Common / Short Print") is absent."""

    def __init__(self, name: str):
        super().__init__(f"sentinel rarity {name!r} not found")
        self.name = name
