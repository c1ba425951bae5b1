"""Canonical book state and market statistics."""
from .stats import MarketStatsCache
from .store import BookSide, BookView, OrderBook, OrderBookStore, ViewLevel

__all__ = [
    "BookSide",
    "BookView",
    "MarketStatsCache",
    "OrderBook",
    "OrderBookStore",
    "ViewLevel",
]
