"""Immutable bar records and ordered bar series."""
from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union, overload

import pandas as pd

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["number", "date", "open", "high", "low", "close", "volume", "adj_close"]


class MalformedSeriesError(ValueError):
    """Raised when a series breaks the ascending, unique numbering it is assumed to have."""


@dataclass(frozen=True)
class Bar:
    """One period's price record, keyed by a monotonic bar number."""

    number: int
    date: Any
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    adjusted_close: Optional[float] = None

    @property
    def bullish(self) -> bool:
        return self.close > self.open

    @property
    def bearish(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class Span:
    """Inclusive range of bar numbers covered by a match."""

    first: int
    last: int

    def __post_init__(self) -> None:
        if self.first > self.last:
            raise ValueError(f"Span first {self.first} is after last {self.last}")

    @property
    def length(self) -> int:
        return self.last - self.first + 1

    def contains(self, other: "Span") -> bool:
        return self.first <= other.first and other.last <= self.last


class BarSeries(Sequence[Bar]):
    """Ordered run of bars, ascending by number.

    Slicing returns another ``BarSeries`` that keeps the original bar numbers
    and remembers the series it was cut from as ``root``, so per-bar
    predicates that look at neighbouring bars see the same history inside a
    slice as in the full series.
    """

    __slots__ = ("_bars", "_positions", "_numbers", "_frame", "_root")

    def __init__(self, bars: Iterable[Bar] = (), root: Optional["BarSeries"] = None) -> None:
        self._bars: Tuple[Bar, ...] = tuple(bars)
        self._positions: Optional[Dict[int, int]] = None
        self._numbers: Optional[Tuple[int, ...]] = None
        self._frame: Optional[pd.DataFrame] = None
        self._root = root

    @overload
    def __getitem__(self, item: int) -> Bar: ...

    @overload
    def __getitem__(self, item: slice) -> "BarSeries": ...

    def __getitem__(self, item: Union[int, slice]) -> Union[Bar, "BarSeries"]:
        if isinstance(item, slice):
            if item.step not in (None, 1):
                raise ValueError("BarSeries slices must be contiguous and ascending")
            return BarSeries(self._bars[item], root=self.root)
        return self._bars[item]

    def __len__(self) -> int:
        return len(self._bars)

    def __iter__(self) -> Iterator[Bar]:
        return iter(self._bars)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BarSeries):
            return NotImplemented
        return self._bars == other._bars

    def __hash__(self) -> int:
        return hash(self._bars)

    def __repr__(self) -> str:
        if not self._bars:
            return "BarSeries([])"
        return f"BarSeries({len(self._bars)} bars, {self._bars[0].number}..{self._bars[-1].number})"

    @property
    def numbers(self) -> Tuple[int, ...]:
        if self._numbers is None:
            self._numbers = tuple(bar.number for bar in self._bars)
        return self._numbers

    @property
    def root(self) -> "BarSeries":
        """The unsliced series this one was cut from (itself when not a slice)."""
        return self._root if self._root is not None else self

    @property
    def offset(self) -> int:
        """Position of this series' first bar inside ``root``."""
        if self._root is None or not self._bars:
            return 0
        return self._root.index_of(self._bars[0].number)

    @property
    def span(self) -> Span:
        if not self._bars:
            raise MalformedSeriesError("Empty series has no span")
        return Span(self._bars[0].number, self._bars[-1].number)

    def index_of(self, number: int) -> int:
        """Return the position of the bar carrying ``number``."""
        if self._positions is None:
            positions = {bar.number: pos for pos, bar in enumerate(self._bars)}
            if len(positions) != len(self._bars):
                msg = "Series contains duplicate bar numbers"
                logger.error(msg)
                raise MalformedSeriesError(msg)
            self._positions = positions
        try:
            return self._positions[number]
        except KeyError:
            msg = f"Bar {number} not found in {self!r}"
            logger.error(msg)
            raise MalformedSeriesError(msg) from None

    def locate(self, number: int) -> int:
        """Return the position of the last bar whose number does not exceed ``number``."""
        pos = bisect.bisect_right(self.numbers, number) - 1
        if pos < 0:
            msg = f"Bar {number} precedes the start of {self!r}"
            logger.error(msg)
            raise MalformedSeriesError(msg)
        return pos

    def between(self, first: int, last: int) -> "BarSeries":
        return self[self.locate(first) : self.locate(last) + 1]

    def to_frame(self) -> pd.DataFrame:
        """Columnar view indexed by bar number, cached per series."""
        if self._frame is None:
            records = [
                {
                    "number": bar.number,
                    "date": bar.date,
                    "open": bar.open,
                    "high": bar.high,
                    "low": bar.low,
                    "close": bar.close,
                    "volume": bar.volume,
                    "adj_close": bar.adjusted_close if bar.adjusted_close is not None else bar.close,
                }
                for bar in self._bars
            ]
            frame = pd.DataFrame(records, columns=FRAME_COLUMNS)
            frame.index = pd.Index(self.numbers, name="bar")
            self._frame = frame
        return self._frame.copy()

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "BarSeries":
        for column in ("open", "high", "low", "close"):
            if column not in frame.columns:
                msg = f"Bar frame must include a '{column}' column"
                logger.error(msg)
                raise KeyError(msg)
        frame = frame.reset_index(drop=True)
        if "number" in frame.columns:
            numbers = frame["number"].astype(int).tolist()
        else:
            numbers = list(range(len(frame)))
        if "date" in frame.columns:
            dates = frame["date"].tolist()
        elif "timestamp" in frame.columns:
            dates = frame["timestamp"].tolist()
        else:
            dates = [None] * len(frame)
        volumes = frame["volume"].astype(float).tolist() if "volume" in frame.columns else [0.0] * len(frame)
        adjusted = frame["adj_close"].astype(float).tolist() if "adj_close" in frame.columns else [None] * len(frame)
        bars = [
            Bar(
                number=number,
                date=date,
                open=float(row_open),
                high=float(row_high),
                low=float(row_low),
                close=float(row_close),
                volume=volume,
                adjusted_close=adj,
            )
            for number, date, row_open, row_high, row_low, row_close, volume, adj in zip(
                numbers,
                dates,
                frame["open"].tolist(),
                frame["high"].tolist(),
                frame["low"].tolist(),
                frame["close"].tolist(),
                volumes,
                adjusted,
            )
        ]
        return cls(bars)


__all__ = [
    "Bar",
    "BarSeries",
    "MalformedSeriesError",
    "Span",
    "FRAME_COLUMNS",
]
