from __future__ import annotations

from decimal import Decimal

from ..types import MarketStats


class MarketStatsCache:
    """Last trade price and 24h volume; every ticker replaces both."""

    def __init__(self) -> None:
        self._stats: MarketStats | None = None

    def replace(self, last: Decimal, volume: Decimal) -> MarketStats:
        self._stats = MarketStats(last=last, vol24h=volume)
        return self._stats

    def get(self) -> MarketStats | None:
        return self._stats

    def reset(self) -> None:
        self._stats = None
