import pytest

from candlepl.bars import ResolutionTuple, build_resolution_tuple
from candlepl.dsl import ResolutionMatch, at, bar_pattern, overlay, parallel, run_pattern

UP_THEN_DOWN = [
    (10, 11), (11, 12), (12, 13), (13, 14), (14, 15),
    (15, 14), (14, 13), (13, 12), (12, 11), (11, 10),
]


@pytest.fixture
def swing(make_series):
    return build_resolution_tuple(make_series(UP_THEN_DOWN, start=0), factors=(1, 5))


def test_at_pairs_instance_with_resliced_context(random_bars):
    resolutions = build_resolution_tuple(random_bars, factors=(1, 5))
    matches = at(0, run_pattern("BULLISH", min_length=2)).search(resolutions).to_list()
    assert matches
    for match in matches:
        assert isinstance(match, ResolutionMatch)
        assert match.context[0].span == match.instance.span
        coarse = match.context[1]
        assert coarse[0].number <= match.instance.span.first
        assert coarse[-1].number <= match.instance.span.last


def test_coarse_match_keeps_every_fine_bar_of_its_period(swing):
    rising = at(1, bar_pattern("BULLISH")).search(swing).to_list()
    assert len(rising) == 1
    assert rising[0].context[0].numbers == (0, 1, 2, 3, 4)
    assert rising[0].context[1].numbers == (0,)

    falling = at(1, bar_pattern("BEARISH")).search(swing).first()
    assert falling.context[0].numbers == (5, 6, 7, 8, 9)


def test_parallel_across_resolutions(swing):
    found = parallel(run_pattern("BULLISH", min_length=5), bar_pattern("BULLISH")).search(swing).to_list()
    assert len(found) == 1
    composite = found[0]
    assert composite.anchor_numbers == (0, 4)
    assert (composite.span.first, composite.span.last) == (0, 4)
    assert composite.subs[1].span.first == 0
    assert parallel(run_pattern("BULLISH", min_length=5), bar_pattern("BEARISH")).search(swing).to_list() == []


def test_parallel_on_duplicated_series_matches_overlay(five_bars):
    resolutions = ResolutionTuple.duplicate(five_bars)
    via_parallel = parallel(bar_pattern("BULLISH"), run_pattern("BULLISH")).search(resolutions)
    via_overlay = overlay(bar_pattern("BULLISH"), run_pattern("BULLISH")).search(five_bars)
    assert [instance.span for instance in via_parallel] == [instance.span for instance in via_overlay]
