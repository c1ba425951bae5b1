"""Command line entry point for depthsim.

A thin reference consumer of :class:`depthsim.live.session.FeedSession`: it
can list venue instrument names, stream the top of book and run a delayed
execution simulation against a live feed.
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from decimal import Decimal
from typing import List, Optional

import typer

from ..adapters import ADAPTERS, get_adapter_class
from ..config import settings
from ..core.symbols import normalize
from ..exceptions import InvalidSimulationRequest, TransportFault, UnknownVenue
from ..logging_conf import setup_logging

log = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, help="Multi-venue order book feed and execution simulator")


def _validate_venue(value: str) -> str:
    try:
        get_adapter_class(value)
    except UnknownVenue:
        choices = ", ".join(sorted(ADAPTERS))
        raise typer.BadParameter(f"Invalid venue, choose one of: {choices}")
    return value.lower()


def _validate_symbol(value: str) -> str:
    try:
        return normalize(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))


@app.command()
def venues(
    symbol: str = typer.Option(settings.default_symbol, "--symbol", callback=_validate_symbol),
) -> None:
    """Show every venue with its websocket URL and instrument for ``symbol``."""

    for name, cls in sorted(ADAPTERS.items()):
        adapter = cls()
        typer.echo(f"{name:<8} {adapter.instrument(symbol):<16} {adapter.ws_url}")


def _format_book(view, stats) -> str:
    best_bid = view.bids[0] if view.bids else None
    best_ask = view.asks[0] if view.asks else None
    bid = f"{best_bid.quantity}@{best_bid.price}" if best_bid else "-"
    ask = f"{best_ask.quantity}@{best_ask.price}" if best_ask else "-"
    last = stats.last if stats else "-"
    vol = stats.vol24h if stats else "-"
    return (
        f"bid {bid} | ask {ask} | imbalance {view.imbalance():.1f}% "
        f"| last {last} | vol24h {vol}"
    )


@app.command()
def watch(
    venue: str = typer.Option(settings.default_venue, "--venue", callback=_validate_venue),
    symbol: str = typer.Option(settings.default_symbol, "--symbol", callback=_validate_symbol),
    depth: int = typer.Option(settings.book_depth, "--depth", help="Levels per side"),
    duration: float = typer.Option(30.0, "--duration", help="Seconds to stream"),
    interval: float = typer.Option(1.0, "--interval", help="Seconds between prints"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    """Stream the normalized book and print the top of book periodically."""

    setup_logging(log_level)
    from ..live.session import FeedSession

    async def _run() -> None:
        session = FeedSession(venue, symbol, depth=depth)
        session.start()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + duration
        try:
            while loop.time() < deadline:
                await asyncio.sleep(interval)
                typer.echo(
                    f"[{session.status.value}] "
                    + _format_book(session.order_book(), session.market_stats())
                )
        finally:
            await session.stop()

    asyncio.run(_run())


@app.command()
def simulate(
    venue: str = typer.Option(settings.default_venue, "--venue", callback=_validate_venue),
    symbol: str = typer.Option(settings.default_symbol, "--symbol", callback=_validate_symbol),
    side: str = typer.Option("Buy", "--side", help="Buy or Sell"),
    order_type: str = typer.Option("Market", "--type", help="Market or Limit"),
    quantity: str = typer.Option(..., "--qty", help="Order quantity"),
    price: Optional[str] = typer.Option(None, "--price", help="Limit price"),
    delays: List[int] = typer.Option([0], "--delay", help="Scenario delay in seconds"),
    timeout: float = typer.Option(15.0, "--timeout", help="Seconds to wait for a book"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
) -> None:
    """Connect, wait for a book and print simulated fills as JSON."""

    setup_logging(log_level)
    from ..execution.order_types import SimulationRequest
    from ..live.session import FeedSession

    try:
        request = SimulationRequest(
            side=side,
            type_=order_type,
            quantity=Decimal(quantity),
            price=price,
            delays=frozenset(delays),
        )
        request.validate()
    except (InvalidSimulationRequest, ArithmeticError) as exc:
        raise typer.BadParameter(str(exc))

    async def _run() -> list[dict]:
        session = FeedSession(venue, symbol)
        session.start()
        try:
            await session.wait_for_book(timeout)
            results = await session.simulate(request)
        finally:
            await session.stop()
        return [r.to_dict() for r in results]

    try:
        out = asyncio.run(_run())
    except (TransportFault, asyncio.TimeoutError) as exc:
        typer.echo(f"no order book from {venue}: {str(exc) or 'timed out'}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(out, indent=2))


def main() -> int:
    """Entry point used by ``python -m depthsim.cli`` and the console script.

    The app runs in standalone mode so usage errors are printed and
    ``typer.Exit`` codes are honoured; the resulting ``SystemExit`` is turned
    back into a return code.
    """
    try:
        app()
    except SystemExit as exc:
        if exc.code is None:
            return 0
        return exc.code if isinstance(exc.code, int) else 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
