"""Frame classification entry point used by the ingestion pipeline.

:func:`decode` never raises for bad input: a frame that cannot be decoded is
returned as a :class:`~depthsim.types.ProtocolError` so a single bad message
never tears down the feed.
"""

from __future__ import annotations

import logging

from ..adapters import VenueAdapter, get_adapter
from ..types import Event, ProtocolError
from ..utils.metrics import FRAMES, PROTOCOL_ERRORS

log = logging.getLogger(__name__)


def decode(venue: str | VenueAdapter, raw: str | bytes) -> Event:
    """Classify ``raw`` using the adapter registered for ``venue``."""

    adapter = venue if isinstance(venue, VenueAdapter) else get_adapter(venue)
    try:
        event = adapter.decode(raw)
    except Exception as exc:
        text = raw if isinstance(raw, str) else repr(raw)
        event = ProtocolError(f"{type(exc).__name__}: {exc}", raw=text)

    FRAMES.labels(venue=adapter.name, kind=event.kind).inc()
    if isinstance(event, ProtocolError):
        PROTOCOL_ERRORS.labels(venue=adapter.name).inc()
        log.warning("%s protocol error: %s", adapter.name, event.message)
    return event


__all__ = ["decode"]
