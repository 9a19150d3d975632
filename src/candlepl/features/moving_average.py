"""Moving averages over bar series."""
from __future__ import annotations

import pandas as pd

from candlepl.bars.series import BarSeries


def moving_average(series: BarSeries, period: int, field: str = "close") -> pd.Series:
    """Trailing simple moving average indexed by bar number.

    Values stay NaN until ``period`` bars are available.
    """
    if period < 1:
        raise ValueError("Moving average period must be at least 1")
    frame = series.to_frame()
    if field not in frame.columns:
        raise KeyError(f"Unknown bar field {field}")
    values = frame[field].astype(float)
    average = values.rolling(window=period, min_periods=period).mean()
    return average.rename(f"ma_{field}_{period}")
