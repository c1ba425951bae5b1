from .decoder import decode

__all__ = ["decode"]
