"""Multi-venue order book normalization and delayed execution simulation."""

__version__ = "0.1.0"
