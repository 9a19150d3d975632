import pytest

from candlepl.config import BoundaryConvention
from candlepl.dsl import Constrained, FollowedBy, Overlay, PatternExpression, build_pattern, parse_pattern


def _spans(pattern, bars):
    return [(i.span.first, i.span.last) for i in pattern.search(bars)]


def test_parse_pattern_builds_tree():
    expr = parse_pattern(
        {
            "name": "followed_by",
            "children": [{"name": "BULLISH"}, {"name": "BEARISH"}],
            "constraint": {"min_length": 2},
        }
    )
    assert isinstance(expr, PatternExpression)
    assert expr.name == "FOLLOWED_BY"
    assert [child.name for child in expr.children] == ["BULLISH", "BEARISH"]
    pattern = expr.build()
    assert isinstance(pattern, Constrained)
    assert isinstance(pattern.pattern, FollowedBy)


def test_build_pattern_matches_five_bar_scenario(five_bars):
    pattern = build_pattern({"name": "FOLLOWED_BY", "children": [{"name": "BULLISH"}, {"name": "BEARISH"}]})
    assert _spans(pattern, five_bars) == [(1, 2)]
    both = build_pattern({"name": "OVERLAY", "children": [{"name": "BULLISH"}, {"name": "BULLISH"}]})
    assert isinstance(both, Overlay)
    assert _spans(both, five_bars) == [(1, 1), (3, 3)]


def test_boundary_param_overrides_default(five_bars):
    definition = {
        "name": "FOLLOWED_BY",
        "params": {"boundary": "inclusive"},
        "children": [{"name": "BULLISH"}, {"name": "BEARISH"}],
    }
    pattern = build_pattern(definition)
    assert pattern.boundary is BoundaryConvention.INCLUSIVE
    assert _spans(pattern, five_bars) == []
    overridden = build_pattern(
        {"name": "FOLLOWED_BY", "children": [{"name": "BULLISH"}, {"name": "BEARISH"}]},
        boundary=BoundaryConvention.INCLUSIVE,
    )
    assert overridden.boundary is BoundaryConvention.INCLUSIVE


def test_followed_by_folds_left(make_series):
    bars = make_series([(10, 11), (11, 10), (10, 11)])
    pattern = build_pattern(
        {"name": "FOLLOWED_BY", "children": [{"name": "BULLISH"}, {"name": "BEARISH"}, {"name": "BULLISH"}]}
    )
    found = pattern.search(bars).to_list()
    assert [(i.span.first, i.span.last) for i in found] == [(1, 3)]
    assert found[0].anchor_numbers == (1, 2, 3)
    assert isinstance(pattern.first, FollowedBy)


def test_run_definitions(make_series):
    bars = make_series([(1, 2), (2, 3), (3, 4), (4, 3)])
    by_param = build_pattern({"name": "RUN", "params": {"predicate": "BULLISH", "min_length": 3}})
    by_child = build_pattern({"name": "RUN", "params": {"min_length": 3}, "children": [{"name": "BULLISH"}]})
    assert _spans(by_param, bars) == [(1, 3)]
    assert _spans(by_child, bars) == [(1, 3)]


def test_constraint_block_limits_length(make_series):
    bars = make_series([(1, 2), (2, 3), (3, 4)])
    pattern = build_pattern({"name": "RUN", "params": {"predicate": "BULLISH"}, "constraint": {"max_length": 1}})
    assert _spans(pattern, bars) == [(1, 1), (2, 2), (3, 3)]


@pytest.mark.parametrize(
    "definition, error",
    [
        ({"name": "MYSTERY"}, KeyError),
        ({"params": {}}, KeyError),
        ({"name": "FOLLOWED_BY", "children": [{"name": "BULLISH"}]}, ValueError),
        ({"name": "OVERLAY", "children": [{"name": "BULLISH"}]}, ValueError),
        ({"name": "RUN"}, ValueError),
        ({"name": "BULLISH", "children": [{"name": "BEARISH"}]}, ValueError),
    ],
)
def test_invalid_definitions(definition, error):
    with pytest.raises(error):
        build_pattern(definition)
