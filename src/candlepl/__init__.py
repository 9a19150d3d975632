"""Top-level package for the candlestick pattern language."""

__all__ = [
    "bars",
    "config",
    "dsl",
    "features",
    "pipeline",
    "reporting",
    "utils",
]
