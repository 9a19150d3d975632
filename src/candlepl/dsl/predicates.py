"""Vectorized per-bar predicates and the atomic patterns built from them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, Optional, Protocol, Tuple, Union

import numpy as np
import pandas as pd

from candlepl.bars.series import BarSeries
from candlepl.dsl.instances import PatternInstance
from candlepl.dsl.patterns import Atomic


class PredicateFunction(Protocol):
    def __call__(self, data: pd.DataFrame, params: dict[str, float]) -> pd.Series:
        ...


@dataclass
class Predicate:
    name: str
    params: Dict[str, float]
    evaluator: PredicateFunction
    _root_mask: Optional[Tuple[BarSeries, np.ndarray]] = field(default=None, init=False, repr=False, compare=False)

    def evaluate(self, data: pd.DataFrame) -> pd.Series:
        mask = self.evaluator(data, self.params)
        series = pd.Series(mask, index=data.index, name=self.name)
        series = series.replace([np.inf, -np.inf], np.nan).fillna(False)
        return series.astype(bool)

    def mask(self, bars: BarSeries) -> np.ndarray:
        """Boolean array aligned with the positions of ``bars``.

        The predicate runs over the whole root series and the slice's window
        is cut out afterwards, so lookback predicates judge the first bar of
        a slice against the bars before it.
        """
        if not len(bars):
            return np.zeros(0, dtype=bool)
        root = bars.root
        if self._root_mask is None or self._root_mask[0] is not root:
            self._root_mask = (root, self.evaluate(root.to_frame()).to_numpy(dtype=bool))
        start = bars.offset
        return self._root_mask[1][start : start + len(bars)]


class PredicateRegistry:
    """Registry for base predicates used by the pattern definitions."""

    def __init__(self) -> None:
        self._predicates: Dict[str, PredicateFunction] = {}

    def register(self, name: str, fn: PredicateFunction) -> None:
        if name in self._predicates:
            raise KeyError(f"Predicate {name} already registered")
        self._predicates[name] = fn

    def list(self) -> Iterable[str]:
        return self._predicates.keys()

    def get(self, name: str) -> PredicateFunction:
        if name not in self._predicates:
            raise KeyError(f"Predicate {name} not found")
        return self._predicates[name]

    def __contains__(self, name: object) -> bool:
        return name in self._predicates


registry = PredicateRegistry()


def _ensure_fields(df: pd.DataFrame) -> pd.DataFrame:
    if "body" not in df:
        df = df.copy()
        df["body"] = (df["close"] - df["open"]).abs()
        df["upper_wick"] = df["high"] - df[["open", "close"]].max(axis=1)
        df["lower_wick"] = df[["open", "close"]].min(axis=1) - df["low"]
        df["true_range"] = df["high"] - df["low"]
    return df


def bullish_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    return df["close"] > df["open"]


def bearish_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    return df["close"] < df["open"]


def doji_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    df = _ensure_fields(df)
    ratio = float(params.get("ratio", 0.1))
    body_share = df["body"] / df["true_range"].replace(0, np.nan)
    # A bar with no range at all is the flattest doji there is.
    return body_share.fillna(0.0) <= ratio


def wick_ratio_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    df = _ensure_fields(df)
    kind = params.get("kind", "lower")
    threshold = params.get("threshold", 0.5)
    if kind == "lower":
        ratio = df["lower_wick"] / df["true_range"].replace(0, np.nan)
    else:
        ratio = df["upper_wick"] / df["true_range"].replace(0, np.nan)
    return ratio.fillna(0.0) >= threshold


def wick_dominance_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    df = _ensure_fields(df)
    kind = params.get("kind", "upper")
    min_ratio = params.get("ratio", 1.5)
    if kind == "upper":
        ratio = df["upper_wick"] / df["body"].replace(0, np.nan)
    else:
        ratio = df["lower_wick"] / df["body"].replace(0, np.nan)
    return ratio.fillna(0.0) >= min_ratio


def inside_bar_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    high_prev = df["high"].shift(1)
    low_prev = df["low"].shift(1)
    return (df["high"] < high_prev) & (df["low"] > low_prev)


def outside_bar_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    high_prev = df["high"].shift(1)
    low_prev = df["low"].shift(1)
    return (df["high"] > high_prev) & (df["low"] < low_prev)


def _engulf_bounds(df: pd.DataFrame):
    open_prev = df["open"].shift(1)
    close_prev = df["close"].shift(1)
    min_prev = pd.concat([open_prev, close_prev], axis=1).min(axis=1)
    max_prev = pd.concat([open_prev, close_prev], axis=1).max(axis=1)
    min_curr = df[["open", "close"]].min(axis=1)
    max_curr = df[["open", "close"]].max(axis=1)
    engulfs = (min_curr <= min_prev) & (max_curr >= max_prev)
    return open_prev, close_prev, engulfs


def bullish_engulf_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    open_prev, close_prev, engulfs = _engulf_bounds(df)
    return (close_prev < open_prev) & (df["close"] > df["open"]) & engulfs


def bearish_engulf_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    open_prev, close_prev, engulfs = _engulf_bounds(df)
    return (close_prev > open_prev) & (df["close"] < df["open"]) & engulfs


def volume_spike_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    window = int(params.get("window", 20))
    quantile = float(params.get("quantile", 0.8))
    rolling = df["volume"].rolling(window=window, min_periods=window)
    threshold = rolling.quantile(quantile)
    return (df["volume"] >= threshold).fillna(False)


def pivot_high_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    left = int(params.get("left", 2))
    right = int(params.get("right", 2))
    highs = df["high"]
    cond = pd.Series(True, index=df.index)
    for i in range(1, left + 1):
        cond &= highs > highs.shift(i)
    for i in range(1, right + 1):
        cond &= highs >= highs.shift(-i)
    return cond.fillna(False)


def pivot_low_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    left = int(params.get("left", 2))
    right = int(params.get("right", 2))
    lows = df["low"]
    cond = pd.Series(True, index=df.index)
    for i in range(1, left + 1):
        cond &= lows < lows.shift(i)
    for i in range(1, right + 1):
        cond &= lows <= lows.shift(-i)
    return cond.fillna(False)


def higher_low_predicate(df: pd.DataFrame, params: dict[str, float]) -> pd.Series:
    depth = int(params.get("depth", 1))
    lows = [df["low"].shift(i) for i in range(depth + 1)]
    mask = pd.Series(True, index=df.index)
    for i in range(1, len(lows)):
        mask &= lows[i - 1] > lows[i]
    return mask


def register_default_predicates() -> None:
    registry.register("BULLISH", bullish_predicate)
    registry.register("BEARISH", bearish_predicate)
    registry.register("DOJI", doji_predicate)
    registry.register("LONG_LOWER_WICK", wick_ratio_predicate)
    registry.register("WICK_DOMINANCE", wick_dominance_predicate)
    registry.register("INSIDE_BAR", inside_bar_predicate)
    registry.register("OUTSIDE_BAR", outside_bar_predicate)
    registry.register("BULLISH_ENGULF", bullish_engulf_predicate)
    registry.register("BEARISH_ENGULF", bearish_engulf_predicate)
    registry.register("VOLUME_SPIKE", volume_spike_predicate)
    registry.register("PIVOT_HIGH", pivot_high_predicate)
    registry.register("PIVOT_LOW", pivot_low_predicate)
    registry.register("HIGHER_LOW", higher_low_predicate)


def resolve_predicate(predicate: Union[str, Predicate], params: Optional[dict] = None) -> Predicate:
    if isinstance(predicate, Predicate):
        return predicate
    return Predicate(name=predicate, evaluator=registry.get(predicate), params=dict(params or {}))


def bar_pattern(predicate: Union[str, Predicate], **params: float) -> Atomic:
    """Every bar satisfying ``predicate``, each as a one-bar instance in series order."""
    resolved = resolve_predicate(predicate, params)

    def extract(bars: BarSeries) -> Iterator[PatternInstance]:
        for pos in np.flatnonzero(resolved.mask(bars)):
            yield PatternInstance.single(bars[int(pos)])

    return Atomic(extractor=extract, name=resolved.name)


def run_pattern(
    predicate: Union[str, Predicate],
    min_length: int = 1,
    max_length: Optional[int] = None,
    **params: float,
) -> Atomic:
    """Every contiguous window of bars all satisfying ``predicate``.

    Windows come longest first, earliest start first among equal lengths, and
    are anchored on their first and last bar.
    """
    if min_length < 1:
        raise ValueError("min_length must be at least 1")
    resolved = resolve_predicate(predicate, params)

    def extract(bars: BarSeries) -> Iterator[PatternInstance]:
        mask = resolved.mask(bars)
        # streak[i] counts consecutive satisfying bars ending at position i
        streak = np.zeros(len(mask), dtype=np.int64)
        for pos, hit in enumerate(mask):
            if hit:
                streak[pos] = streak[pos - 1] + 1 if pos else 1
        longest = int(streak.max()) if len(streak) else 0
        upper = longest if max_length is None else min(longest, max_length)
        for length in range(upper, min_length - 1, -1):
            for end in np.flatnonzero(streak >= length):
                start = int(end) - length + 1
                first, last = bars[start], bars[int(end)]
                anchors = (first,) if length == 1 else (first, last)
                yield PatternInstance.from_anchors(anchors)

    return Atomic(extractor=extract, name=f"RUN({resolved.name})")


register_default_predicates()


__all__ = [
    "Predicate",
    "PredicateFunction",
    "PredicateRegistry",
    "bar_pattern",
    "registry",
    "resolve_predicate",
    "run_pattern",
]
