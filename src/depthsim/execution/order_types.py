from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from ..exceptions import InvalidSimulationRequest
from ..types import Level


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class Side(_CaseInsensitiveEnum):
    BUY = "Buy"
    SELL = "Sell"


class OrderType(_CaseInsensitiveEnum):
    LIMIT = "Limit"
    MARKET = "Market"


def _decimal(value: Any, name: str) -> Decimal | None:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        dec = value
    else:
        try:
            dec = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidSimulationRequest(f"{name} must be a number, got {value!r}") from exc
    if not dec.is_finite():
        raise InvalidSimulationRequest(f"{name} must be finite, got {value!r}")
    return dec


@dataclass(frozen=True)
class SimulationRequest:
    """Hypothetical order to evaluate against the live book.

    ``delays`` are the scenario trigger times in whole seconds; each one
    produces its own :class:`SimulationResult`.
    """

    side: Side
    type_: OrderType
    quantity: Decimal
    price: Decimal | None = None
    delays: frozenset[int] = field(default_factory=lambda: frozenset({0}))

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "side", Side(self.side))
            object.__setattr__(self, "type_", OrderType(self.type_))
        except ValueError as exc:
            raise InvalidSimulationRequest(str(exc)) from exc
        object.__setattr__(self, "quantity", _decimal(self.quantity, "quantity"))
        object.__setattr__(self, "price", _decimal(self.price, "price"))
        delays = self.delays
        if isinstance(delays, (int, str)):
            delays = [delays]
        object.__setattr__(self, "delays", frozenset(self._delay(d) for d in delays))

    @staticmethod
    def _delay(value: Any) -> int:
        if isinstance(value, bool):
            raise InvalidSimulationRequest(f"delay must be an integer, got {value!r}")
        try:
            dec = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise InvalidSimulationRequest(f"delay must be an integer, got {value!r}") from exc
        if not dec.is_finite() or dec != dec.to_integral_value():
            raise InvalidSimulationRequest(f"delay must be whole seconds, got {value!r}")
        return int(dec)

    def validate(self) -> None:
        """Reject the request before any scenario is scheduled."""
        if self.quantity is None or self.quantity <= 0:
            raise InvalidSimulationRequest("quantity must be positive")
        if self.type_ is OrderType.LIMIT and (self.price is None or self.price <= 0):
            raise InvalidSimulationRequest("limit orders require a positive price")
        if not self.delays:
            raise InvalidSimulationRequest("at least one delay scenario is required")
        if any(d < 0 for d in self.delays):
            raise InvalidSimulationRequest("delays must be non-negative")


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one delay scenario.

    ``error`` is only set when the book had no reference price on the
    relevant side; every numeric field is ``None`` in that case.
    """

    delay: int
    side: Side
    type_: OrderType
    quantity: Decimal
    filled_quantity: Decimal | None = None
    fill_percentage: Decimal | None = None
    avg_fill_price: Decimal | None = None
    market_price: Decimal | None = None
    sim_price: Decimal | None = None
    slippage_pct: Decimal | None = None
    warning: str | None = None
    error: str | None = None
    fills: tuple[Level, ...] = ()

    def to_dict(self) -> dict:
        def _s(v: Decimal | None) -> str | None:
            return None if v is None else str(v)

        return {
            "delay": self.delay,
            "side": self.side.value,
            "type": self.type_.value,
            "quantity": _s(self.quantity),
            "filled_quantity": _s(self.filled_quantity),
            "fill_percentage": _s(self.fill_percentage),
            "avg_fill_price": _s(self.avg_fill_price),
            "market_price": _s(self.market_price),
            "sim_price": _s(self.sim_price),
            "slippage_pct": _s(self.slippage_pct),
            "warning": self.warning,
            "error": self.error,
        }


__all__ = [
    "OrderType",
    "Side",
    "SimulationRequest",
    "SimulationResult",
]
