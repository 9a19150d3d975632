"""Derived series computed from bars."""

from .moving_average import moving_average  # noqa: F401
