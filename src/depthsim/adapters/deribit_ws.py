"""WebSocket adapter for Deribit perpetual futures."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable

from ..core.symbols import split
from ..exceptions import DecodeFailure
from ..types import Delta, Event, Heartbeat, Ignore, Level, ProtocolError, Snapshot, Ticker
from .base import VenueAdapter, to_decimal

log = logging.getLogger(__name__)

_ZERO = Decimal(0)


def normalize(symbol: str) -> str:
    """Return the Deribit perpetual instrument for ``symbol``.

    Only the base asset matters: ``BTC-USDT`` and ``BTC-USD`` both map to
    ``BTC-PERPETUAL``.
    """

    base, _ = split(symbol)
    return f"{base}-PERPETUAL"


class DeribitAdapter(VenueAdapter):
    """Deribit JSON-RPC 2.0 public feed.

    Book entries report ``amount`` in USD notional; quantities are converted
    to contract units as ``amount / price`` so every venue exposes the same
    displayed size.
    """

    name = "deribit"
    display_name = "Deribit"

    def instrument(self, symbol: str) -> str:
        return normalize(symbol)

    @staticmethod
    def _rpc(method: str, params: dict) -> dict:
        return {"jsonrpc": "2.0", "method": method, "params": params}

    def subscribe_messages(self, symbol: str) -> list[dict]:
        inst = self.instrument(symbol)
        return [
            self._rpc("public/subscribe", {"channels": [f"book.{inst}.100ms"]}),
            self._rpc("public/subscribe", {"channels": [f"ticker.{inst}.100ms"]}),
        ]

    def heartbeat_message(self) -> dict:
        return self._rpc("public/test", {})

    # ------------------------------------------------------------------
    @staticmethod
    def _quantity(price: Decimal, amount: Decimal) -> Decimal:
        if price <= 0:
            raise DecodeFailure(f"non positive price {price}")
        return amount / price

    def _entries(self, rows: Iterable[Any] | None) -> tuple[Level, ...]:
        """Parse ``[action, price, amount]`` triples (or ``{price, amount}``)."""
        if rows is None:
            return ()
        levels = []
        for row in rows:
            if isinstance(row, dict):
                action, price, amount = "new", row.get("price"), row.get("amount")
            elif isinstance(row, (list, tuple)) and len(row) == 3:
                action, price, amount = row
            else:
                raise DecodeFailure(f"malformed book entry {row!r}")
            px = to_decimal(price)
            if action == "delete":
                levels.append((px, _ZERO))
            elif action in ("new", "change"):
                levels.append((px, self._quantity(px, to_decimal(amount))))
            else:
                raise DecodeFailure(f"unknown book action {action!r}")
        return tuple(levels)

    def _decode(self, msg: dict) -> Event:
        error = msg.get("error")
        if error:
            if isinstance(error, dict):
                return ProtocolError(str(error.get("message") or error.get("code")))
            return ProtocolError(str(error))

        result = msg.get("result")
        if isinstance(result, dict) and "version" in result:
            # reply to ``public/test``
            return Heartbeat()

        params = msg.get("params") or {}
        channel = params.get("channel") or ""
        data = params.get("data") or {}
        if channel.startswith("book"):
            kind = data.get("type")
            bids = self._entries(data.get("bids"))
            asks = self._entries(data.get("asks"))
            if kind == "snapshot":
                return Snapshot(bids, asks)
            if kind == "change":
                return Delta(bids, asks)
            log.debug("unknown book frame type %r", kind)
            return Ignore()
        if channel.startswith("ticker"):
            stats = data.get("stats") or {}
            volume = stats.get("volume_usd", data.get("volume_usd"))
            return Ticker(to_decimal(data.get("last_price")), to_decimal(volume))
        return Ignore()
