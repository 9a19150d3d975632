"""Shared pytest fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

PATH_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PATH_ROOT / "src"))
sys.path.insert(0, str(PATH_ROOT))


import pytest

from candlepl.bars import Bar, BarSeries
from candlepl.utils import generate_random_walk_bars


def make_bars(pairs, start=1):
    """Bars numbered from ``start`` with the given (open, close) pairs."""
    bars = []
    for offset, (open_, close) in enumerate(pairs):
        bars.append(
            Bar(
                number=start + offset,
                date=None,
                open=float(open_),
                high=float(max(open_, close)) + 0.5,
                low=float(min(open_, close)) - 0.5,
                close=float(close),
                volume=100.0,
            )
        )
    return BarSeries(bars)


@pytest.fixture
def five_bars():
    return make_bars([(10, 12), (12, 11), (11, 13), (13, 13), (13, 10)])


@pytest.fixture
def random_bars():
    return generate_random_walk_bars(length=80, random_state=7)


@pytest.fixture
def make_series():
    return make_bars
