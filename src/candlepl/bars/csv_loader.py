"""Load daily price history from Yahoo-style CSV exports."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from candlepl.bars.series import BarSeries

logger = logging.getLogger(__name__)

CSV_COLUMNS = {
    "Date": "date",
    "Open": "open",
    "High": "high",
    "Low": "low",
    "Close": "close",
    "Volume": "volume",
    "Adj Close": "adj_close",
}


def read_price_frame(path: Path) -> pd.DataFrame:
    """Read and normalise a price CSV, dropping rows that fail to parse."""
    frame = pd.read_csv(path)
    missing = [column for column in CSV_COLUMNS if column not in frame.columns]
    if missing:
        msg = f"Price file {path} is missing columns: {', '.join(missing)}"
        logger.error(msg)
        raise KeyError(msg)
    frame = frame[list(CSV_COLUMNS)].rename(columns=CSV_COLUMNS)
    frame["date"] = pd.to_datetime(frame["date"], errors="coerce")
    for column in ("open", "high", "low", "close", "volume", "adj_close"):
        frame[column] = pd.to_numeric(frame[column], errors="coerce")
    before = len(frame)
    frame = frame.dropna(subset=["date", "open", "high", "low", "close"])
    if len(frame) < before:
        logger.warning("Dropped %d unparseable rows from %s", before - len(frame), path)
    frame["volume"] = frame["volume"].fillna(0.0)
    frame["adj_close"] = frame["adj_close"].fillna(frame["close"])
    return frame


def load_bars_csv(path: Path, days: Optional[int] = None) -> BarSeries:
    """Load a CSV into a ``BarSeries`` numbered from 0 in date order.

    When ``days`` is given only the most recent ``days`` rows are kept.
    """
    frame = read_price_frame(Path(path))
    frame = frame.sort_values("date")
    if days is not None:
        frame = frame.tail(days)
    frame = frame.reset_index(drop=True)
    frame["number"] = range(len(frame))
    logger.info("Loaded %d bars from %s", len(frame), path)
    return BarSeries.from_frame(frame)


__all__ = ["CSV_COLUMNS", "load_bars_csv", "read_price_frame"]
