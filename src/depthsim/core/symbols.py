"""Utilities for normalising market symbols before venue translation.

Consumers pass trading pairs in a loose, human friendly notation such as
``btc/usdt`` or ``BTC-USDT``.  Internally the canonical form is
``BASE-QUOTE`` in upper case with a single dash, which is what the venue
adapters translate into their own instrument names.

Examples
--------
>>> normalize("BTC/USDT")
'BTC-USDT'
>>> normalize("eth-usd")
'ETH-USD'
>>> split("BTC-USDT")
('BTC', 'USDT')

The helpers do not validate that a pair is listed anywhere; they only reshape
the string.
"""
from __future__ import annotations

__all__ = ["normalize", "split"]


def normalize(symbol: str) -> str:
    """Return the canonical ``BASE-QUOTE`` representation for ``symbol``.

    Parameters
    ----------
    symbol: str
        Market symbol using ``/``, ``-`` or ``_`` as separator.

    Raises
    ------
    ValueError
        If ``symbol`` does not contain both a base and a quote asset.
    """
    s = (symbol or "").strip().upper().replace("/", "-").replace("_", "-")
    parts: list[str] = [p for p in s.split("-") if p]
    if len(parts) != 2:
        raise ValueError(f"symbol must look like BASE-QUOTE, got {symbol!r}")
    base, quote = parts
    return f"{base}-{quote}"


def split(symbol: str) -> tuple[str, str]:
    """Return ``(base, quote)`` for ``symbol``."""
    base, quote = normalize(symbol).split("-")
    return base, quote
