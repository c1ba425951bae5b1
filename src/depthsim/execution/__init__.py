"""Execution simulation against the canonical book."""
from .order_types import OrderType, Side, SimulationRequest, SimulationResult
from .overlay import BookOverlay, overlay
from .simulator import (
    HIGH_IMPACT_WARNING,
    MARKET_PRICE_UNAVAILABLE,
    evaluate,
    simulate,
)

__all__ = [
    "BookOverlay",
    "HIGH_IMPACT_WARNING",
    "MARKET_PRICE_UNAVAILABLE",
    "OrderType",
    "Side",
    "SimulationRequest",
    "SimulationResult",
    "evaluate",
    "overlay",
    "simulate",
]
