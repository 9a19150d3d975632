import pytest

from candlepl.config import ChartConfig, MovingAverageSpec
from candlepl.dsl import run_pattern
from candlepl.reporting import render_chart


def test_render_chart_writes_svg(tmp_path, random_bars):
    instances = run_pattern("BULLISH", min_length=2).search(random_bars).head(5)
    config = ChartConfig(moving_averages=[MovingAverageSpec(period=10, color="yellow")])
    path = render_chart(random_bars, tmp_path / "chart.svg", instances, config)
    text = path.read_text()
    assert text.lstrip().startswith("<?xml")
    assert "<svg" in text


def test_render_chart_skips_foreign_matches(tmp_path, random_bars):
    instances = run_pattern("BULLISH").search(random_bars).head(3)
    path = render_chart(random_bars[40:], tmp_path / "tail.svg", instances)
    assert path.exists()


def test_render_chart_rejects_empty_series(tmp_path, random_bars):
    with pytest.raises(ValueError):
        render_chart(random_bars[:0], tmp_path / "empty.svg")
