"""Candlestick pattern language: composable patterns over bar series."""

from .instances import InstanceStream, PatternInstance, Span, merge_anchors  # noqa: F401
from .patterns import (  # noqa: F401
    Atomic,
    Constrained,
    FollowedBy,
    Overlay,
    Pattern,
    atomic,
    constrained_by,
    followed_by,
    overlay,
    span_length_between,
)
from .resolution import AtResolution, Parallel, ResolutionMatch, at, parallel  # noqa: F401
from .predicates import Predicate, PredicateRegistry, bar_pattern, registry, run_pattern  # noqa: F401
from .dsl import PatternExpression, build_pattern, parse_pattern  # noqa: F401
