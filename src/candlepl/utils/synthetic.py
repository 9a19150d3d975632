"""Synthetic bar generation for tests and demos."""
from __future__ import annotations

import numpy as np
import pandas as pd

from candlepl.bars.series import BarSeries


def generate_random_walk_bars(
    length: int,
    start_price: float = 100.0,
    random_state: int | np.random.Generator | None = None,
) -> BarSeries:
    """Generate a geometric random walk as a series numbered from 0."""
    rng = random_state if isinstance(random_state, np.random.Generator) else np.random.default_rng(random_state)
    returns = rng.normal(loc=0.0, scale=0.01, size=length)
    prices = start_price * np.exp(np.cumsum(returns))
    opens = np.concatenate((np.array([start_price]), prices[:-1]))
    highs = np.maximum(opens, prices) * (1 + rng.uniform(0, 0.005, size=length))
    lows = np.minimum(opens, prices) * (1 - rng.uniform(0, 0.005, size=length))
    volumes = rng.lognormal(mean=10, sigma=0.3, size=length)
    frame = pd.DataFrame(
        {
            "number": np.arange(length),
            "date": pd.date_range(start="2000-01-03", periods=length, freq="B"),
            "open": opens,
            "high": highs,
            "low": lows,
            "close": prices,
            "volume": volumes,
            "adj_close": prices,
        }
    )
    return BarSeries.from_frame(frame)
