"""Delayed execution simulator.

For every requested delay the simulator asks a *book provider* for the book
as it looks after waiting that many seconds and walks it as if the order had
been sent at that moment.  Scenarios run concurrently and share nothing: each
one works on its own frozen :class:`~depthsim.book.store.OrderBook`, so book
updates arriving while a walk is in progress are never observed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from decimal import Decimal
from typing import Awaitable, Callable, Union

from ..book.store import OrderBook
from ..config import settings
from ..utils.metrics import SIM_SLIPPAGE, SIMULATIONS
from .order_types import OrderType, Side, SimulationRequest, SimulationResult
from .slippage import slippage_pct, walk_book

log = logging.getLogger(__name__)

MARKET_PRICE_UNAVAILABLE = "Market price not available."
HIGH_IMPACT_WARNING = "Warning: High market impact expected!"

BookProvider = Callable[[int], Union[OrderBook, Awaitable[OrderBook]]]


def evaluate(
    request: SimulationRequest,
    book: OrderBook,
    delay: int = 0,
    warn_pct: float | None = None,
) -> SimulationResult:
    """Simulate ``request`` against a single frozen ``book``."""

    if warn_pct is None:
        warn_pct = settings.slippage_warn_pct
    buy = request.side is Side.BUY
    market_price = book.best_ask if buy else book.best_bid
    base = dict(delay=delay, side=request.side, type_=request.type_, quantity=request.quantity)
    if market_price is None:
        SIMULATIONS.labels(outcome="unavailable").inc()
        return SimulationResult(**base, error=MARKET_PRICE_UNAVAILABLE)

    sim_price = market_price if request.type_ is OrderType.MARKET else request.price
    fill = walk_book(
        request.side,
        request.type_,
        sim_price,
        request.quantity,
        book.asks if buy else book.bids,
    )
    avg_px = fill.avg_price
    slip = slippage_pct(avg_px, market_price)
    warning = None
    if slip is not None:
        SIM_SLIPPAGE.labels(side=request.side.value).observe(float(slip))
        if slip > Decimal(str(warn_pct)):
            warning = HIGH_IMPACT_WARNING

    if fill.filled_qty >= request.quantity:
        outcome = "filled"
    elif fill.filled_qty > 0:
        outcome = "partial"
    else:
        outcome = "unfilled"
    SIMULATIONS.labels(outcome=outcome).inc()

    return SimulationResult(
        **base,
        filled_quantity=fill.filled_qty,
        fill_percentage=fill.filled_qty / request.quantity * 100,
        avg_fill_price=avg_px,
        market_price=market_price,
        sim_price=sim_price,
        slippage_pct=slip,
        warning=warning,
        fills=fill.levels,
    )


async def _scenario(
    request: SimulationRequest, provider: BookProvider, delay: int, warn_pct: float | None
) -> SimulationResult:
    book = provider(delay)
    if inspect.isawaitable(book):
        book = await book
    result = evaluate(request, book, delay, warn_pct)
    log.debug(
        "scenario delay=%ss %s %s qty=%s -> filled=%s avg=%s err=%s",
        delay,
        request.side.value,
        request.type_.value,
        request.quantity,
        result.filled_quantity,
        result.avg_fill_price,
        result.error,
    )
    return result


async def simulate(
    request: SimulationRequest,
    provider: BookProvider,
    *,
    warn_pct: float | None = None,
) -> list[SimulationResult]:
    """Run one scenario per delay in ``request`` and return them by delay.

    ``provider(delay)`` returns (or resolves to) the book observed after
    ``delay`` seconds.  Invalid requests raise
    :class:`~depthsim.exceptions.InvalidSimulationRequest` before any
    scenario starts.
    """

    request.validate()
    delays = sorted(request.delays)
    tasks = [_scenario(request, provider, d, warn_pct) for d in delays]
    return list(await asyncio.gather(*tasks))


__all__ = [
    "BookProvider",
    "HIGH_IMPACT_WARNING",
    "MARKET_PRICE_UNAVAILABLE",
    "evaluate",
    "simulate",
]
