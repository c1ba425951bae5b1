# src/depthsim/adapters/okx_ws.py
"""Websocket adapter for OKX spot markets.

Targets OKX's v5 public websocket.  The ``books`` channel is consumed as a
sequence of full replacements: every book frame rebuilds both sides, so the
decoder never emits deltas for this venue.  OKX lists spot pairs against USDT
rather than raw USD, hence ``BTC-USD`` is routed to ``BTC-USDT``."""

from __future__ import annotations

import logging

from ..types import Event, Ignore, Snapshot, Ticker
from .base import PONG, VenueAdapter, to_decimal

log = logging.getLogger(__name__)


class OKXAdapter(VenueAdapter):
    """OKX public book and ticker feed."""

    name = "okx"
    display_name = "OKX"
    pong_payload = PONG

    BOOK_CHANNEL = "books"
    TICKER_CHANNEL = "tickers"

    def instrument(self, symbol: str) -> str:
        sym = self.normalize_symbol(symbol)
        if sym.endswith("-USD"):
            return sym[: -len("-USD")] + "-USDT"
        return sym

    def subscribe_messages(self, symbol: str) -> list[dict]:
        inst = self.instrument(symbol)
        return [
            {"op": "subscribe", "args": [{"channel": self.BOOK_CHANNEL, "instId": inst}]},
            {"op": "subscribe", "args": [{"channel": self.TICKER_CHANNEL, "instId": inst}]},
        ]

    def heartbeat_message(self) -> str:
        return "ping"

    def _decode(self, msg: dict) -> Event:
        channel = (msg.get("arg") or {}).get("channel")
        data = msg.get("data")
        if not data:
            # subscribe acknowledgements carry ``event`` but no data
            return Ignore()
        if channel == self.BOOK_CHANNEL:
            ob = data[0]
            return Snapshot(self._levels(ob.get("bids")), self._levels(ob.get("asks")))
        if channel == self.TICKER_CHANNEL:
            t = data[0]
            return Ticker(to_decimal(t.get("last")), to_decimal(t.get("volCcy24h")))
        return Ignore()
