from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable
import json
import logging

from ..core.symbols import normalize as normalize_symbol
from ..config import settings
from ..exceptions import DecodeFailure
from ..types import Event, Ignore, Level, ProtocolError

# Non-JSON keepalive reply some venues send back for a text ``ping``
PONG = "pong"


def to_decimal(value: Any) -> Decimal:
    """Convert a wire number (string, int or already parsed) to ``Decimal``.

    Floats are routed through ``str`` so the decimal keeps the shortest repr
    instead of the binary expansion.
    """
    if isinstance(value, bool) or value is None:
        raise DecodeFailure(f"expected a number, got {value!r}")
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, float):
        dec = Decimal(str(value))
    else:
        try:
            dec = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise DecodeFailure(f"expected a number, got {value!r}") from exc
    if not dec.is_finite():
        raise DecodeFailure(f"non finite number {value!r}")
    return dec


class VenueAdapter(ABC):
    """Base class for all venue adapters.

    An adapter owns everything that is specific to one exchange's public
    websocket: how a canonical ``BASE-QUOTE`` pair is named on the venue, the
    subscription frames for the book and ticker channels, the keepalive frame
    and its cadence, and how inbound frames are classified.  Adapters perform
    no network I/O; :class:`depthsim.live.session.FeedSubscription` drives the
    transport.
    """

    name: str
    display_name: str
    # literal keepalive reply; it does not count as market data
    pong_payload: str | None = None

    def __init__(self, ws_url: str | None = None, ping_interval: float | None = None) -> None:
        self.log = logging.getLogger(getattr(self, "name", self.__class__.__name__))
        name = getattr(self, "name", "")
        self.ws_url = ws_url or getattr(settings, f"{name}_ws_url")
        self.heartbeat_interval = float(
            ping_interval
            if ping_interval is not None
            else getattr(settings, f"{name}_ping_interval")
        )

    # ------------------------------------------------------------------
    # Symbol mapping
    @staticmethod
    def normalize_symbol(symbol: str) -> str:
        """Return the canonical ``BASE-QUOTE`` form of ``symbol``."""
        return normalize_symbol(symbol)

    @abstractmethod
    def instrument(self, symbol: str) -> str:
        """Return the venue instrument identifier for ``symbol``."""

    # ------------------------------------------------------------------
    # Outbound frames
    @abstractmethod
    def subscribe_messages(self, symbol: str) -> list[dict]:
        """Return the book and ticker subscription messages for ``symbol``."""

    @abstractmethod
    def heartbeat_message(self) -> str | dict:
        """Return the keepalive message sent every ``heartbeat_interval``."""

    @staticmethod
    def encode(message: str | dict) -> str:
        """Serialise ``message`` the way browsers' ``JSON.stringify`` does."""
        if isinstance(message, str):
            return message
        return json.dumps(message, separators=(",", ":"))

    def subscribe_frames(self, symbol: str) -> list[str]:
        return [self.encode(m) for m in self.subscribe_messages(symbol)]

    def heartbeat_frame(self) -> str:
        return self.encode(self.heartbeat_message())

    # ------------------------------------------------------------------
    # Inbound frames
    def decode(self, raw: str | bytes) -> Event:
        """Classify ``raw`` into a normalized event.

        Handles the parts shared by every venue (keepalive text replies, JSON
        parsing and the ``{"event": "error"}`` envelope) before delegating to
        :meth:`_decode`.  Malformed frames raise :class:`DecodeFailure`; use
        :func:`depthsim.feed.decoder.decode` to get them as
        :class:`ProtocolError` events instead.
        """
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        if raw.strip() == PONG:
            return Ignore()
        try:
            msg = json.loads(raw, parse_float=Decimal)
        except ValueError as exc:
            raise DecodeFailure(f"invalid JSON frame: {exc}") from exc
        if not isinstance(msg, dict):
            raise DecodeFailure(f"expected a JSON object, got {type(msg).__name__}")
        if msg.get("event") == "error":
            return ProtocolError(str(msg.get("msg") or msg.get("code") or "error"), raw=raw)
        return self._decode(msg)

    @abstractmethod
    def _decode(self, msg: dict) -> Event:
        """Venue specific classification of a parsed JSON object."""

    @staticmethod
    def _levels(rows: Iterable[Any] | None) -> tuple[Level, ...]:
        """Parse ``[price, quantity, ...]`` rows into decimal levels."""
        if rows is None:
            return ()
        levels = []
        for row in rows:
            if not isinstance(row, (list, tuple)) or len(row) < 2:
                raise DecodeFailure(f"malformed price level {row!r}")
            levels.append((to_decimal(row[0]), to_decimal(row[1])))
        return tuple(levels)


__all__ = ["VenueAdapter", "to_decimal", "PONG"]
