"""Canonical two-sided order book with copy-on-write publication.

The ingestion pipeline is the only writer.  Every mutation builds new
:class:`BookSide` objects and publishes both sides with a single attribute
assignment, so readers (the execution simulator, consumers rendering the
ladder) always see either the previous or the next complete book and never a
half merged side.  Published sides are never mutated again.

Sides are kept in :class:`sortedcontainers.SortedDict` instances keyed by
price; bids use a negated key so iteration always starts at the best price.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from functools import cached_property
from typing import Iterable, Iterator

from sortedcontainers import SortedDict

from ..config import settings
from ..types import Level

log = logging.getLogger(__name__)

_ZERO = Decimal(0)


def _descending(price: Decimal) -> Decimal:
    return -price


class BookSide:
    """Immutable price ladder for one side of the book."""

    def __init__(self, levels: SortedDict, descending: bool) -> None:
        self._levels = levels
        self.descending = descending

    @classmethod
    def empty(cls, descending: bool) -> "BookSide":
        return cls(cls._new_dict(descending), descending)

    @classmethod
    def from_levels(cls, levels: Iterable[Level], descending: bool) -> "BookSide":
        """Build a side from ``(price, quantity)`` pairs, dropping empty levels."""
        book = cls._new_dict(descending)
        for price, qty in levels:
            if qty > 0:
                book[price] = qty
            else:
                book.pop(price, None)
        return cls(book, descending)

    @staticmethod
    def _new_dict(descending: bool) -> SortedDict:
        return SortedDict(_descending) if descending else SortedDict()

    def merged(self, delta: Iterable[Level]) -> "BookSide":
        """Return a new side with ``delta`` applied.

        A quantity of zero removes the price; anything else inserts or
        overwrites it.  Removing a price that is not present is a no-op.

        ``SortedDict.copy`` re-sorts the existing levels, which are already in
        order, and each delta level is then an O(log n) insert or removal.
        """
        book = self._levels.copy()
        for price, qty in delta:
            if qty > 0:
                book[price] = qty
            else:
                book.pop(price, None)
        return BookSide(book, self.descending)

    @cached_property
    def levels(self) -> tuple[Level, ...]:
        """All levels, best price first."""
        return tuple(self._levels.items())

    def best(self) -> Level | None:
        if not self._levels:
            return None
        return self._levels.peekitem(0)

    def get(self, price: Decimal) -> Decimal | None:
        return self._levels.get(price)

    def __iter__(self) -> Iterator[Level]:
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __bool__(self) -> bool:
        return bool(self._levels)


@dataclass(frozen=True)
class OrderBook:
    """Point-in-time copy of both sides, best price first."""

    bids: tuple[Level, ...] = ()
    asks: tuple[Level, ...] = ()
    version: int = 0

    @property
    def best_bid(self) -> Decimal | None:
        return self.bids[0][0] if self.bids else None

    @property
    def best_ask(self) -> Decimal | None:
        return self.asks[0][0] if self.asks else None

    @property
    def spread(self) -> Decimal | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

    @property
    def mid(self) -> Decimal | None:
        if self.best_bid is None or self.best_ask is None:
            return None
        return (self.best_ask + self.best_bid) / 2

    def is_empty(self) -> bool:
        return not self.bids and not self.asks


@dataclass(frozen=True)
class ViewLevel:
    price: Decimal
    quantity: Decimal
    # running sums walking away from the best price
    total: Decimal
    cumulative_qty: Decimal

    @property
    def notional(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class BookView:
    """Depth limited, annotated ladder handed to consumers."""

    bids: tuple[ViewLevel, ...]
    asks: tuple[ViewLevel, ...]
    version: int = 0

    @property
    def max_quantity(self) -> Decimal:
        """Largest single level size across both displayed sides."""
        sizes = [lvl.quantity for lvl in self.bids + self.asks]
        return max(sizes, default=_ZERO)

    def imbalance(self) -> Decimal:
        """Bid share of displayed quantity in percent (50 when empty)."""
        bid_qty = self.bids[-1].cumulative_qty if self.bids else _ZERO
        ask_qty = self.asks[-1].cumulative_qty if self.asks else _ZERO
        if bid_qty + ask_qty == 0:
            return Decimal(50)
        return bid_qty / (bid_qty + ask_qty) * 100


def annotate(levels: Iterable[Level]) -> tuple[ViewLevel, ...]:
    out = []
    total = _ZERO
    cumulative = _ZERO
    for price, qty in levels:
        total += price * qty
        cumulative += qty
        out.append(ViewLevel(price, qty, total, cumulative))
    return tuple(out)


@dataclass(frozen=True)
class _BookState:
    bids: BookSide
    asks: BookSide
    version: int


class OrderBookStore:
    """Single-writer order book for one active subscription."""

    def __init__(self) -> None:
        self._state = self._empty_state(0)

    @staticmethod
    def _empty_state(version: int) -> _BookState:
        return _BookState(BookSide.empty(True), BookSide.empty(False), version)

    # ------------------------------------------------------------------
    # Writer API
    def apply_snapshot(self, bids: Iterable[Level], asks: Iterable[Level]) -> None:
        """Replace both sides wholesale."""
        state = self._state
        self._state = _BookState(
            BookSide.from_levels(bids, descending=True),
            BookSide.from_levels(asks, descending=False),
            state.version + 1,
        )

    def apply_delta(self, bids: Iterable[Level], asks: Iterable[Level]) -> bool:
        """Merge changed levels into the current book.

        Returns ``False`` without touching the book when no snapshot has been
        applied yet (both sides empty); deltas only make sense relative to an
        established snapshot.
        """
        state = self._state
        if not state.bids and not state.asks:
            log.debug("delta dropped: no snapshot yet")
            return False
        self._state = _BookState(
            state.bids.merged(bids),
            state.asks.merged(asks),
            state.version + 1,
        )
        return True

    def reset(self) -> None:
        self._state = self._empty_state(self._state.version + 1)

    # ------------------------------------------------------------------
    # Reader API
    @property
    def version(self) -> int:
        return self._state.version

    def is_empty(self) -> bool:
        state = self._state
        return not state.bids and not state.asks

    def snapshot(self) -> OrderBook:
        state = self._state
        return OrderBook(state.bids.levels, state.asks.levels, state.version)

    def snapshot_view(self, depth: int | None = None) -> BookView:
        """Return the best ``depth`` levels per side with running totals."""
        if depth is None:
            depth = settings.book_depth
        if depth < 0:
            raise ValueError("depth must be non-negative")
        state = self._state
        return BookView(
            annotate(state.bids.levels[:depth]),
            annotate(state.asks.levels[:depth]),
            state.version,
        )


__all__ = ["BookSide", "BookView", "OrderBook", "OrderBookStore", "ViewLevel", "annotate"]
