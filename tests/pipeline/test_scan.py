from candlepl.config import NamedPattern, ScanConfig, load_scan_config
from candlepl.pipeline import run_scan
from candlepl.pipeline.scan import SUMMARY_COLUMNS


def test_run_scan_five_bar_scenario(five_bars):
    config = ScanConfig(
        patterns=[
            NamedPattern("bull_bear", {"name": "FOLLOWED_BY", "children": [{"name": "BULLISH"}, {"name": "BEARISH"}]}),
            NamedPattern("bullish", {"name": "BULLISH"}),
        ]
    )
    result = run_scan(five_bars, config)
    assert [i.anchor_numbers for i in result.matches["bull_bear"]] == [(1, 2)]
    summary = result.summary()
    assert list(summary.columns) == SUMMARY_COLUMNS
    assert summary["pattern"].tolist() == ["bull_bear", "bullish", "bullish"]
    assert summary.iloc[0]["anchors"] == [1, 2]
    assert len(result.all_instances()) == 3


def test_run_scan_caps_instances(random_bars):
    config = ScanConfig(patterns=[NamedPattern("runs", {"name": "RUN", "params": {"predicate": "BULLISH"}})], max_instances=4)
    result = run_scan(random_bars, config)
    assert len(result.matches["runs"]) == 4


def test_default_config_scans(random_bars):
    config = load_scan_config()
    result = run_scan(random_bars, config)
    assert set(result.matches) == {named.name for named in config.patterns}
    assert result.summary().shape[1] == len(SUMMARY_COLUMNS)


def test_default_engulfing_reversal_finds_reversal(make_series):
    bars = make_series([(14, 13), (13, 11), (10.5, 13.5)])
    result = run_scan(bars, load_scan_config())
    found = result.matches["engulfing_reversal"]
    assert [(i.span.first, i.span.last) for i in found] == [(1, 3)]
    assert found[0].anchor_numbers == (1, 2, 3)
