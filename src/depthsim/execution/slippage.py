"""Book walking helpers used by the execution simulator.

The estimates are based solely on the visible order book and therefore only
approximate what an exchange would actually fill.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..types import Level
from .order_types import OrderType, Side

_ZERO = Decimal(0)


@dataclass(frozen=True)
class Fill:
    filled_qty: Decimal
    cost: Decimal
    levels: tuple[Level, ...]

    @property
    def avg_price(self) -> Decimal | None:
        if self.filled_qty <= 0:
            return None
        return self.cost / self.filled_qty


def crosses(side: Side, limit_px: Decimal, level_px: Decimal) -> bool:
    """Return True if an order at ``limit_px`` can trade against ``level_px``."""
    if side is Side.BUY:
        return level_px <= limit_px
    return level_px >= limit_px


def walk_book(
    side: Side,
    type_: OrderType,
    limit_px: Decimal,
    qty: Decimal,
    levels: Iterable[Level],
) -> Fill:
    """Consume ``levels`` best price first until ``qty`` is filled.

    Parameters
    ----------
    side:
        Side of the simulated order.  ``levels`` must be the opposite side of
        the book (asks for a buy, bids for a sell).
    type_:
        Market orders take every level; limit orders only the levels their
        price crosses.
    limit_px:
        Simulated order price.
    qty:
        Quantity to execute.
    """
    remaining = qty
    filled = _ZERO
    cost = _ZERO
    taken: list[Level] = []
    for px, level_qty in levels:
        if remaining <= 0:
            break
        if type_ is not OrderType.MARKET and not crosses(side, limit_px, px):
            # levels are sorted best first; nothing further can cross
            break
        take = min(remaining, level_qty)
        filled += take
        cost += take * px
        remaining -= take
        taken.append((px, take))
    return Fill(filled, cost, tuple(taken))


def slippage_pct(avg_px: Decimal | None, ref_px: Decimal | None) -> Decimal | None:
    """Absolute deviation of ``avg_px`` from ``ref_px`` in percent."""
    if avg_px is None or not ref_px:
        return None
    return abs(avg_px - ref_px) / ref_px * 100


__all__ = ["Fill", "crosses", "slippage_pct", "walk_book"]
