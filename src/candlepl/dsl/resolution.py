"""Matching across parallel resolutions of the same time range."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from candlepl.bars.resample import ResolutionTuple
from candlepl.dsl.instances import PatternInstance, merge_anchors
from candlepl.dsl.patterns import Pattern


@dataclass(frozen=True)
class ResolutionMatch:
    """A match found in one slot, paired with every slot re-sliced to its extent."""

    instance: PatternInstance
    context: ResolutionTuple


@dataclass(frozen=True)
class AtResolution(Pattern):
    """Search ``pattern`` in slot ``slot`` of a resolution tuple.

    The context window runs from the first matched bar up to the bar before
    the source slot's next bar, so a coarse match keeps every finer bar of its
    last period.
    """

    slot: int
    pattern: Pattern

    def _search(self, resolutions: ResolutionTuple) -> Iterator[ResolutionMatch]:
        source = resolutions[self.slot]
        horizon = max((member.span.last for member in resolutions if len(member)), default=0)
        for instance in self.pattern.search(source):
            pos = source.index_of(instance.span.last)
            upper = source[pos + 1].number - 1 if pos + 1 < len(source) else horizon
            context = resolutions.window(instance.span.first, upper)
            yield ResolutionMatch(instance=instance, context=context)


@dataclass(frozen=True)
class Parallel(Pattern):
    """``first`` in slot 0 and ``second`` across the matching window of ``slot``.

    ``second`` is searched only inside the re-sliced member and must cover that
    whole window, so both patterns recognise the same stretch of time in their
    own resolution. A coarse window can start before the slot 0 match, so the
    composite spans both matches.
    """

    first: Pattern
    second: Pattern
    slot: int = 1

    def _search(self, resolutions: ResolutionTuple) -> Iterator[PatternInstance]:
        for match in AtResolution(0, self.first).search(resolutions):
            window = match.context[self.slot]
            extent = window.span
            for candidate in self.second.search(window):
                if candidate.span != extent:
                    continue
                anchors = merge_anchors(match.instance.anchors, candidate.anchors)
                yield PatternInstance.from_anchors(anchors, subs=(match.instance, candidate))


def at(slot: int, pattern: Pattern) -> AtResolution:
    return AtResolution(slot=slot, pattern=pattern)


def parallel(first: Pattern, second: Pattern, slot: int = 1) -> Parallel:
    return Parallel(first=first, second=second, slot=slot)


__all__ = ["AtResolution", "Parallel", "ResolutionMatch", "at", "parallel"]
