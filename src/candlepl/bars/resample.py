"""Coarser resolutions of a bar series and parallel resolution tuples."""
from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple, Union, overload

from candlepl.bars.series import Bar, BarSeries


class ResolutionTuple(Sequence[BarSeries]):
    """Fixed-size group of series covering the same range at different resolutions.

    Members share one numbering axis: a coarse bar carries the number of the
    first fine bar it aggregates, so each member can translate a bar number
    into its own position with ``BarSeries.locate``.
    """

    __slots__ = ("_members",)

    def __init__(self, members: Iterable[BarSeries]) -> None:
        self._members: Tuple[BarSeries, ...] = tuple(members)
        if not self._members:
            raise ValueError("A resolution tuple needs at least one series")

    @overload
    def __getitem__(self, slot: int) -> BarSeries: ...

    @overload
    def __getitem__(self, slot: slice) -> Tuple[BarSeries, ...]: ...

    def __getitem__(self, slot: Union[int, slice]) -> Union[BarSeries, Tuple[BarSeries, ...]]:
        return self._members[slot]

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[BarSeries]:
        return iter(self._members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResolutionTuple):
            return NotImplemented
        return self._members == other._members

    def __hash__(self) -> int:
        return hash(self._members)

    def __repr__(self) -> str:
        return f"ResolutionTuple({', '.join(repr(member) for member in self._members)})"

    def window(self, first: int, last: int) -> "ResolutionTuple":
        """Re-slice every member to the bars covering bar numbers ``first..last``."""
        return ResolutionTuple(member.between(first, last) for member in self._members)

    @classmethod
    def duplicate(cls, series: BarSeries, size: int = 2) -> "ResolutionTuple":
        return cls([series] * size)


def _aggregate(rows: Sequence[Bar]) -> Bar:
    first = rows[0]
    last = rows[-1]
    return Bar(
        number=first.number,
        date=last.date,
        open=float(first.open),
        high=max(float(row.high) for row in rows),
        low=min(float(row.low) for row in rows),
        close=float(last.close),
        volume=float(sum(float(row.volume) for row in rows)),
        adjusted_close=last.adjusted_close,
    )


def resample_bars(series: BarSeries, factor: int) -> BarSeries:
    """Aggregate consecutive groups of ``factor`` bars into coarse bars."""
    if factor < 1:
        raise ValueError("Resampling factor must be at least 1")
    if factor == 1:
        return series
    records: List[Bar] = []
    for start in range(0, len(series), factor):
        records.append(_aggregate(series[start : start + factor]))
    return BarSeries(records)


def build_resolution_tuple(series: BarSeries, factors: Sequence[int] = (1, 5)) -> ResolutionTuple:
    return ResolutionTuple(resample_bars(series, factor) for factor in factors)


__all__ = [
    "ResolutionTuple",
    "build_resolution_tuple",
    "resample_bars",
]
