"""Composable pattern algebra over bar series.

A pattern exposes one operation, ``search``, returning a lazy, restartable
stream of ``PatternInstance`` ordered longest match first. Patterns are
immutable values: build them once with the combinators below and reuse them
across any number of searches.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List

from candlepl.bars.series import BarSeries, Span
from candlepl.config import SEQUENCE_BOUNDARY, BoundaryConvention
from candlepl.dsl.instances import InstanceStream, PatternInstance, merge_anchors

Extractor = Callable[[BarSeries], Iterable[PatternInstance]]
Constraint = Callable[[PatternInstance], bool]


class Pattern(ABC):
    """Base class for every pattern variant."""

    def search(self, bars: Any) -> InstanceStream:
        return InstanceStream(lambda: self._search(bars))

    @abstractmethod
    def _search(self, bars: Any) -> Iterator[Any]:
        ...

    def __rshift__(self, other: "Pattern") -> "FollowedBy":
        return followed_by(self, other)

    def __and__(self, other: "Pattern") -> "Overlay":
        return overlay(self, other)


@dataclass(frozen=True)
class Atomic(Pattern):
    """Lift a raw extractor into a pattern; ordering is the extractor's."""

    extractor: Extractor
    name: str = ""

    def _search(self, bars: BarSeries) -> Iterator[PatternInstance]:
        yield from self.extractor(bars)


@dataclass(frozen=True)
class Constrained(Pattern):
    """Keep only the instances of ``pattern`` accepted by ``predicate``."""

    pattern: Pattern
    predicate: Constraint

    def _search(self, bars: Any) -> Iterator[Any]:
        for instance in self.pattern.search(bars):
            if self.predicate(instance):
                yield instance


@dataclass(frozen=True)
class FollowedBy(Pattern):
    """``first`` then ``second``, handing off at the pivot bar.

    With ``EXCLUSIVE`` boundaries the second match must start on the bar right
    after the first match ends; with ``INCLUSIVE`` boundaries both matches
    share the pivot bar as an anchor. Results come in ``first`` order, then
    ``second`` order, which is not strictly longest-first overall.
    """

    first: Pattern
    second: Pattern
    boundary: BoundaryConvention = SEQUENCE_BOUNDARY

    def _search(self, bars: BarSeries) -> Iterator[PatternInstance]:
        inclusive = self.boundary is BoundaryConvention.INCLUSIVE
        for left in self.first.search(bars):
            pivot = bars.index_of(left.span.last)
            rest = bars[pivot if inclusive else pivot + 1 :]
            if not rest:
                continue
            handoff = rest[0].number
            for right in self.second.search(rest):
                if right.anchors[0].number != handoff:
                    continue
                tail = right.anchors[1:] if inclusive else right.anchors
                yield PatternInstance(
                    anchors=left.anchors + tail,
                    span=Span(left.span.first, right.span.last),
                    subs=(left, right),
                )


@dataclass(frozen=True)
class Overlay(Pattern):
    """Both patterns must match exactly the same span of the same series."""

    first: Pattern
    second: Pattern

    def _search(self, bars: BarSeries) -> Iterator[PatternInstance]:
        by_span: Dict[Span, List[PatternInstance]] | None = None
        for left in self.first.search(bars):
            if by_span is None:
                by_span = defaultdict(list)
                for candidate in self.second.search(bars):
                    by_span[candidate.span].append(candidate)
            for right in by_span.get(left.span, ()):
                yield PatternInstance(
                    anchors=merge_anchors(left.anchors, right.anchors),
                    span=left.span,
                    subs=(left, right),
                )


def atomic(extractor: Extractor, name: str = "") -> Atomic:
    return Atomic(extractor=extractor, name=name)


def constrained_by(pattern: Pattern, predicate: Constraint) -> Constrained:
    return Constrained(pattern=pattern, predicate=predicate)


def followed_by(first: Pattern, second: Pattern, boundary: BoundaryConvention | None = None) -> FollowedBy:
    return FollowedBy(first=first, second=second, boundary=boundary or SEQUENCE_BOUNDARY)


def overlay(first: Pattern, second: Pattern) -> Overlay:
    return Overlay(first=first, second=second)


def span_length_between(min_length: int = 1, max_length: int | None = None) -> Constraint:
    """Constraint accepting instances whose span length lies in the given bounds."""

    def _check(instance: PatternInstance) -> bool:
        if instance.length < min_length:
            return False
        return max_length is None or instance.length <= max_length

    return _check


__all__ = [
    "Atomic",
    "Constrained",
    "Constraint",
    "Extractor",
    "FollowedBy",
    "Overlay",
    "Pattern",
    "atomic",
    "constrained_by",
    "followed_by",
    "overlay",
    "span_length_between",
]
