"""Standard depthsim exceptions."""

from __future__ import annotations


class TransportFault(Exception):
    """The websocket connection closed, failed or could not send.

    Surfaced to consumers as :attr:`ConnectionStatus.ERROR`; it never reaches
    the process top level.
    """


class DecodeFailure(Exception):
    """A frame did not have the shape its venue promises.

    Raised by venue decoders and converted into a
    :class:`~depthsim.types.ProtocolError` event by
    :func:`depthsim.feed.decoder.decode`.
    """


class InvalidSimulationRequest(ValueError):
    """Simulation parameters rejected before any scenario is scheduled."""


class UnknownVenue(KeyError):
    """No adapter is registered under the requested venue name."""


__all__ = [
    "TransportFault",
    "DecodeFailure",
    "InvalidSimulationRequest",
    "UnknownVenue",
]
