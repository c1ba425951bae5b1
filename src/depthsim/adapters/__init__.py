"""Venue adapters keyed by venue identifier."""

from __future__ import annotations

from functools import lru_cache

from ..exceptions import UnknownVenue
from .base import VenueAdapter
from .bybit_ws import BybitAdapter
from .deribit_ws import DeribitAdapter
from .okx_ws import OKXAdapter

ADAPTERS: dict[str, type[VenueAdapter]] = {
    OKXAdapter.name: OKXAdapter,
    BybitAdapter.name: BybitAdapter,
    DeribitAdapter.name: DeribitAdapter,
}


def get_adapter_class(venue: str) -> type[VenueAdapter]:
    try:
        return ADAPTERS[venue.lower()]
    except KeyError:
        choices = ", ".join(sorted(ADAPTERS))
        raise UnknownVenue(f"unknown venue {venue!r}, choose one of: {choices}") from None


@lru_cache(maxsize=None)
def get_adapter(venue: str) -> VenueAdapter:
    """Return a shared adapter instance configured from settings."""
    return get_adapter_class(venue)()


__all__ = [
    "ADAPTERS",
    "VenueAdapter",
    "OKXAdapter",
    "BybitAdapter",
    "DeribitAdapter",
    "get_adapter",
    "get_adapter_class",
]
