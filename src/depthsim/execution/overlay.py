"""Project a simulation result onto a displayed book ladder.

A limit order is shown as an extra level on its own side at the position its
price would take in the queue.  A market order flags the opposite-side levels
it would consume.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..book.store import BookView, ViewLevel
from .order_types import OrderType, Side, SimulationResult


@dataclass(frozen=True)
class OverlayLevel:
    price: Decimal
    quantity: Decimal
    total: Decimal
    simulated: bool = False
    affected: bool = False
    delay: int | None = None


@dataclass(frozen=True)
class BookOverlay:
    bids: tuple[OverlayLevel, ...]
    asks: tuple[OverlayLevel, ...]


def _plain(levels: tuple[ViewLevel, ...]) -> list[OverlayLevel]:
    return [OverlayLevel(lvl.price, lvl.quantity, lvl.total) for lvl in levels]


def _insert(levels: list[OverlayLevel], order: OverlayLevel, bid_side: bool) -> list[OverlayLevel]:
    for i, lvl in enumerate(levels):
        ahead = order.price >= lvl.price if bid_side else order.price <= lvl.price
        if ahead:
            return levels[:i] + [order] + levels[i:]
    return levels + [order]


def _mark(levels: list[OverlayLevel], qty: Decimal, delay: int) -> list[OverlayLevel]:
    out = []
    remaining = qty
    for lvl in levels:
        if remaining > 0:
            remaining -= min(remaining, lvl.quantity)
            lvl = OverlayLevel(lvl.price, lvl.quantity, lvl.total, affected=True, delay=delay)
        out.append(lvl)
    return out


def overlay(view: BookView, result: SimulationResult | None) -> BookOverlay:
    """Return ``view`` annotated with ``result`` (unchanged if it errored)."""

    bids = _plain(view.bids)
    asks = _plain(view.asks)
    if result is None or result.error is not None:
        return BookOverlay(tuple(bids), tuple(asks))

    buy = result.side is Side.BUY
    if result.type_ is OrderType.LIMIT:
        price = result.sim_price
        order = OverlayLevel(
            price, result.quantity, price * result.quantity, simulated=True, delay=result.delay
        )
        if buy:
            bids = _insert(bids, order, bid_side=True)
        else:
            asks = _insert(asks, order, bid_side=False)
    elif buy:
        asks = _mark(asks, result.quantity, result.delay)
    else:
        bids = _mark(bids, result.quantity, result.delay)
    return BookOverlay(tuple(bids), tuple(asks))


__all__ = ["BookOverlay", "OverlayLevel", "overlay"]
