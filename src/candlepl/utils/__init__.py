"""Utility helpers."""

from .synthetic import generate_random_walk_bars  # noqa: F401
