# src/depthsim/live/session.py
"""Live ingestion pipeline for one venue/symbol at a time.

:class:`FeedSubscription` owns a single websocket connection: it sends the
venue's subscription frames, runs the keepalive task, classifies every frame
through :func:`depthsim.feed.decoder.decode` and applies the resulting events
to the shared :class:`OrderBookStore` and :class:`MarketStatsCache`.

:class:`FeedSession` is the in-process surface consumers talk to.  It keeps
exactly one active subscription, tears it down when the venue or symbol
changes and schedules delayed simulation reads through a
:class:`DelayedBookProvider` bound to the subscription's cancellation token.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Callable

import websockets

from ..adapters import VenueAdapter, get_adapter
from ..book.stats import MarketStatsCache
from ..book.store import BookView, OrderBook, OrderBookStore
from ..bus import EventBus
from ..config import settings
from ..core.symbols import normalize
from ..exceptions import TransportFault
from ..execution.order_types import SimulationRequest, SimulationResult
from ..execution.simulator import simulate
from ..feed.decoder import decode
from ..types import (
    ConnectionStatus,
    Delta,
    Event,
    Ignore,
    MarketStats,
    ProtocolError,
    Snapshot,
    Ticker,
)
from ..utils.metrics import HEARTBEATS, WS_FAILURES

log = logging.getLogger(__name__)


class SubscriptionToken:
    """Cancellation token shared by a subscription and its pending reads."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; return True if cancelled meanwhile."""
        if timeout > 0 and not self.cancelled:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._event.wait(), timeout)
        return self.cancelled


class DelayedBookProvider:
    """Return the book observed ``delay`` seconds from now.

    When the owning subscription is cancelled before the delay elapses the
    pending read wakes up immediately and returns an empty book, so the
    scenario reports a missing market price instead of stale data.
    """

    def __init__(self, store: OrderBookStore, token: SubscriptionToken) -> None:
        self.store = store
        self.token = token

    async def __call__(self, delay: int) -> OrderBook:
        if await self.token.wait(delay):
            return OrderBook()
        return self.store.snapshot()


class FeedSubscription:
    """Websocket subscription for a single venue and symbol."""

    def __init__(
        self,
        adapter: VenueAdapter,
        symbol: str,
        store: OrderBookStore,
        stats: MarketStatsCache,
        bus: EventBus | None = None,
        *,
        connect: Callable[..., Any] | None = None,
        depth: int | None = None,
    ) -> None:
        self.adapter = adapter
        self.symbol = normalize(symbol)
        self.store = store
        self.stats = stats
        self.bus = bus or EventBus()
        self.depth = depth if depth is not None else settings.book_depth
        self.token = SubscriptionToken()
        self.status = ConnectionStatus.DISCONNECTED
        self.last_frame_at: datetime | None = None
        self._connect = connect or websockets.connect
        self._task: asyncio.Task | None = None
        self._fault: BaseException | None = None

    # ------------------------------------------------------------------
    async def _set_status(self, status: ConnectionStatus) -> None:
        if status is self.status:
            return
        self.status = status
        log.info("%s %s status -> %s", self.adapter.name, self.symbol, status.value)
        await self.bus.publish("status", status)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(
                self.run(), name=f"feed:{self.adapter.name}:{self.symbol}"
            )
        return self._task

    async def run(self) -> None:
        """Connect, subscribe and process frames until the socket closes."""

        self._fault = None
        await self._set_status(ConnectionStatus.CONNECTING)
        heartbeat: asyncio.Task | None = None
        try:
            async with self._connect(
                self.adapter.ws_url,
                ping_interval=None,
                open_timeout=settings.ws_open_timeout,
            ) as ws:
                await self._set_status(ConnectionStatus.CONNECTED)
                for frame in self.adapter.subscribe_frames(self.symbol):
                    await ws.send(frame)
                log.info(
                    "subscribed to %s on %s", self.adapter.instrument(self.symbol), self.adapter.name
                )
                heartbeat = asyncio.create_task(self._heartbeat(ws))
                async for raw in ws:
                    await self.handle_frame(raw)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._fault = exc
        finally:
            if heartbeat is not None:
                heartbeat.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await heartbeat

        if self._fault is not None:
            WS_FAILURES.labels(venue=self.adapter.name).inc()
            log.warning("%s transport fault: %s", self.adapter.name, self._fault)
            await self._set_status(ConnectionStatus.ERROR)
        else:
            await self._set_status(ConnectionStatus.DISCONNECTED)

    async def _heartbeat(self, ws) -> None:
        frame = self.adapter.heartbeat_frame()
        while True:
            await asyncio.sleep(self.adapter.heartbeat_interval)
            try:
                await ws.send(frame)
            except Exception as exc:
                self._fault = TransportFault(f"heartbeat send failed: {exc}")
                with contextlib.suppress(Exception):
                    await ws.close()
                return
            HEARTBEATS.labels(venue=self.adapter.name).inc()

    async def handle_frame(self, raw: str | bytes) -> Event:
        """Decode ``raw`` and apply it to the book or stats cache."""

        if self.token.cancelled:
            return Ignore()
        text = raw.decode("utf-8", "replace") if isinstance(raw, (bytes, bytearray)) else raw
        if text != self.adapter.pong_payload:
            self.last_frame_at = datetime.now(timezone.utc)

        event = decode(self.adapter, raw)
        if isinstance(event, Snapshot):
            self.store.apply_snapshot(event.bids, event.asks)
            await self.bus.publish("orderbook", self.store.snapshot_view(self.depth))
        elif isinstance(event, Delta):
            if self.store.apply_delta(event.bids, event.asks):
                await self.bus.publish("orderbook", self.store.snapshot_view(self.depth))
        elif isinstance(event, Ticker):
            stats = self.stats.replace(event.last, event.volume)
            await self.bus.publish("ticker", stats)
        elif isinstance(event, ProtocolError):
            await self.bus.publish("protocol_error", event)
        return event

    async def stop(self) -> None:
        """Cancel pending reads, close the transport and stop the heartbeat."""

        self.token.cancel()
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self.status is not ConnectionStatus.ERROR:
            await self._set_status(ConnectionStatus.DISCONNECTED)


class FeedSession:
    """Single active subscription plus the state exposed to consumers."""

    def __init__(
        self,
        venue: str | None = None,
        symbol: str | None = None,
        *,
        bus: EventBus | None = None,
        connect: Callable[..., Any] | None = None,
        depth: int | None = None,
    ) -> None:
        self.venue = (venue or settings.default_venue).lower()
        self.symbol = normalize(symbol or settings.default_symbol)
        self.bus = bus or EventBus()
        self.store = OrderBookStore()
        self.stats = MarketStatsCache()
        self.depth = depth if depth is not None else settings.book_depth
        self._connect = connect
        self._sub: FeedSubscription | None = None
        # validate the venue eagerly
        get_adapter(self.venue)

    @property
    def subscription(self) -> FeedSubscription | None:
        return self._sub

    @property
    def status(self) -> ConnectionStatus:
        return self._sub.status if self._sub else ConnectionStatus.DISCONNECTED

    @property
    def last_frame_at(self) -> datetime | None:
        return self._sub.last_frame_at if self._sub else None

    # ------------------------------------------------------------------
    def start(self) -> asyncio.Task:
        """Start (or return) the subscription for the current venue/symbol."""
        if self._sub is None:
            self._sub = FeedSubscription(
                get_adapter(self.venue),
                self.symbol,
                self.store,
                self.stats,
                self.bus,
                connect=self._connect,
                depth=self.depth,
            )
        return self._sub.start()

    async def stop(self) -> None:
        sub, self._sub = self._sub, None
        if sub is not None:
            await sub.stop()
        self.store.reset()
        self.stats.reset()

    async def switch(self, venue: str | None = None, symbol: str | None = None) -> asyncio.Task:
        """Tear down the current subscription and start a new one."""
        new_venue = (venue or self.venue).lower()
        get_adapter(new_venue)
        new_symbol = normalize(symbol or self.symbol)
        log.info("switching feed %s %s -> %s %s", self.venue, self.symbol, new_venue, new_symbol)
        await self.stop()
        self.venue, self.symbol = new_venue, new_symbol
        return self.start()

    async def reconnect(self) -> asyncio.Task:
        return await self.switch(self.venue, self.symbol)

    # ------------------------------------------------------------------
    def order_book(self, depth: int | None = None) -> BookView:
        return self.store.snapshot_view(self.depth if depth is None else depth)

    def market_stats(self) -> MarketStats | None:
        return self.stats.get()

    def provider(self) -> DelayedBookProvider:
        if self._sub is None:
            token = SubscriptionToken()
            token.cancel()
        else:
            token = self._sub.token
        return DelayedBookProvider(self.store, token)

    async def simulate(self, request: SimulationRequest) -> list[SimulationResult]:
        """Run ``request`` against the live book, one result per delay."""
        request.validate()
        return await simulate(request, self.provider())

    async def wait_for_book(self, timeout: float = 10.0, poll: float = 0.05) -> OrderBook:
        """Wait until the first snapshot has been applied."""

        async def _poll() -> OrderBook:
            while self.store.is_empty():
                if self.status is ConnectionStatus.ERROR:
                    raise TransportFault(f"{self.venue} feed failed before a book arrived")
                await asyncio.sleep(poll)
            return self.store.snapshot()

        return await asyncio.wait_for(_poll(), timeout)


__all__ = [
    "DelayedBookProvider",
    "FeedSession",
    "FeedSubscription",
    "SubscriptionToken",
]
