"""Chart rendering for bars and pattern matches."""

from .chart import render_chart  # noqa: F401
