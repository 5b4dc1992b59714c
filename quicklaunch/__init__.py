"""Application index and fuzzy launcher backend."""

__version__ = "0.1.0"
