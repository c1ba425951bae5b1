"""Core utilities for depthsim."""
from .symbols import normalize, split

__all__ = ["normalize", "split"]
