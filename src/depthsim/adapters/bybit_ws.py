# src/depthsim/adapters/bybit_ws.py
"""WebSocket adapter for Bybit spot markets.

Bybit's ``orderbook.{depth}`` channel first sends a full snapshot and
subsequently publishes incremental updates listing only the changed levels; a
size of ``0`` removes the level.  The decoder passes both through unchanged
and leaves the merge to :class:`depthsim.book.store.OrderBookStore`.
"""

from __future__ import annotations

import logging

from ..types import Delta, Event, Heartbeat, Ignore, ProtocolError, Snapshot, Ticker
from .base import VenueAdapter, to_decimal

log = logging.getLogger(__name__)


class BybitAdapter(VenueAdapter):
    """Bybit v5 public spot feed.

    Spot instruments are named without a separator (``BTCUSDT``) and the
    keepalive is a JSON ``ping`` operation answered with ``ret_msg: pong``.
    """

    name = "bybit"
    display_name = "Bybit"

    def __init__(self, ws_url: str | None = None, ping_interval: float | None = None, depth: int = 50):
        super().__init__(ws_url, ping_interval)
        self.depth = depth

    def instrument(self, symbol: str) -> str:
        return self.normalize_symbol(symbol).replace("-", "")

    def subscribe_messages(self, symbol: str) -> list[dict]:
        inst = self.instrument(symbol)
        return [
            {"op": "subscribe", "args": [f"orderbook.{self.depth}.{inst}"]},
            {"op": "subscribe", "args": [f"tickers.{inst}"]},
        ]

    def heartbeat_message(self) -> dict:
        return {"op": "ping"}

    def _decode(self, msg: dict) -> Event:
        if "op" in msg:
            # command responses: subscribe acks and ping replies
            if msg.get("success") is False:
                return ProtocolError(str(msg.get("ret_msg") or "request failed"))
            if msg.get("op") in ("ping", "pong") or msg.get("ret_msg") == "pong":
                return Heartbeat()
            return Ignore()

        topic = msg.get("topic") or ""
        data = msg.get("data") or {}
        if topic.startswith("orderbook"):
            kind = msg.get("type")
            bids = self._levels(data.get("b"))
            asks = self._levels(data.get("a"))
            if kind == "snapshot":
                return Snapshot(bids, asks)
            if kind == "delta":
                return Delta(bids, asks)
            log.debug("unknown orderbook frame type %r", kind)
            return Ignore()
        if topic.startswith("tickers"):
            return Ticker(to_decimal(data.get("lastPrice")), to_decimal(data.get("volume24h")))
        return Ignore()
