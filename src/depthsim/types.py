from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Union

# (price, quantity); quantity 0 inside a delta removes the level
Level = tuple[Decimal, Decimal]


class ConnectionStatus(str, Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting"
    CONNECTED = "Connected"
    ERROR = "Error"


@dataclass(frozen=True)
class Snapshot:
    bids: tuple[Level, ...] = ()
    asks: tuple[Level, ...] = ()
    kind = "snapshot"


@dataclass(frozen=True)
class Delta:
    bids: tuple[Level, ...] = ()
    asks: tuple[Level, ...] = ()
    kind = "delta"


@dataclass(frozen=True)
class Ticker:
    last: Decimal
    volume: Decimal
    kind = "ticker"


@dataclass(frozen=True)
class Heartbeat:
    kind = "heartbeat"


@dataclass(frozen=True)
class Ignore:
    kind = "ignore"


@dataclass(frozen=True)
class ProtocolError:
    message: str
    raw: str | None = field(default=None, repr=False, compare=False)
    kind = "error"


Event = Union[Snapshot, Delta, Ticker, Heartbeat, Ignore, ProtocolError]


@dataclass(frozen=True)
class MarketStats:
    last: Decimal
    vol24h: Decimal
