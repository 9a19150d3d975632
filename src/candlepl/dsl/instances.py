"""Pattern match results and lazy result streams."""
from __future__ import annotations

from dataclasses import dataclass
from itertools import islice
from typing import Callable, Generic, Iterable, Iterator, List, Tuple, TypeVar

from candlepl.bars.series import Bar, Span

T = TypeVar("T")


@dataclass(frozen=True)
class PatternInstance:
    """One successful match.

    ``anchors`` are the structurally significant bars of the match, ``span``
    the inclusive bar numbers it covers and ``subs`` the component matches it
    was built from (empty for atomic matches).
    """

    anchors: Tuple[Bar, ...]
    span: Span
    subs: Tuple["PatternInstance", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "anchors", tuple(self.anchors))
        object.__setattr__(self, "subs", tuple(self.subs))
        if not self.anchors:
            raise ValueError("A pattern instance needs at least one anchor")
        if self.span.first != self.anchors[0].number or self.span.last != self.anchors[-1].number:
            raise ValueError(
                f"Span {self.span.first}..{self.span.last} does not match anchors "
                f"{self.anchors[0].number}..{self.anchors[-1].number}"
            )
        for sub in self.subs:
            if not self.span.contains(sub.span):
                raise ValueError(f"Sub-match {sub.span} escapes span {self.span}")

    @classmethod
    def single(cls, bar: Bar) -> "PatternInstance":
        return cls(anchors=(bar,), span=Span(bar.number, bar.number))

    @classmethod
    def from_anchors(cls, anchors: Iterable[Bar], subs: Iterable["PatternInstance"] = ()) -> "PatternInstance":
        anchors = tuple(anchors)
        if not anchors:
            raise ValueError("A pattern instance needs at least one anchor")
        return cls(anchors=anchors, span=Span(anchors[0].number, anchors[-1].number), subs=tuple(subs))

    @property
    def length(self) -> int:
        return self.span.length

    @property
    def anchor_numbers(self) -> Tuple[int, ...]:
        return tuple(bar.number for bar in self.anchors)


def merge_anchors(left: Iterable[Bar], right: Iterable[Bar]) -> Tuple[Bar, ...]:
    """Union of two anchor runs, one bar per number, ascending by number.

    The first bar seen for a number wins. Anchors are kept in bar order so the
    merged run still starts and ends on the span boundaries.
    """
    seen = set()
    merged: List[Bar] = []
    for bar in (*left, *right):
        if bar.number in seen:
            continue
        seen.add(bar.number)
        merged.append(bar)
    merged.sort(key=lambda bar: bar.number)
    return tuple(merged)


class InstanceStream(Generic[T]):
    """Restartable lazy sequence of search results.

    Each iteration calls ``factory`` again, so the underlying search runs
    incrementally and only as far as the consumer reads.
    """

    __slots__ = ("_factory",)

    def __init__(self, factory: Callable[[], Iterator[T]]) -> None:
        self._factory = factory

    def __iter__(self) -> Iterator[T]:
        return iter(self._factory())

    def head(self, count: int) -> List[T]:
        return list(islice(self, count))

    def first(self) -> T | None:
        for item in self:
            return item
        return None

    def to_list(self) -> List[T]:
        return list(self)


__all__ = ["InstanceStream", "PatternInstance", "Span", "merge_anchors"]
