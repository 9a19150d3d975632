from scripts.run_pattern_scan import main, parse_args

CSV_TEXT = (
    "Date,Open,High,Low,Close,Volume,Adj Close\n"
    "2010-11-15,13.0,13.5,9.5,10.0,100,10.0\n"
    "2010-11-12,13.0,13.5,12.5,13.0,100,13.0\n"
    "2010-11-11,11.0,13.5,10.5,13.0,100,13.0\n"
    "2010-11-10,12.0,12.5,10.5,11.0,100,11.0\n"
    "2010-11-09,10.0,12.5,9.5,12.0,100,12.0\n"
)


def test_parse_args_defaults(tmp_path):
    args = parse_args([str(tmp_path / "spy.csv")])
    assert args.days is None
    assert args.chart is None


def test_main_scans_and_charts(tmp_path, capsys):
    csv_path = tmp_path / "spy.csv"
    csv_path.write_text(CSV_TEXT)
    chart_path = tmp_path / "spy.svg"
    result = main([str(csv_path), "--chart", str(chart_path)])
    assert [i.anchor_numbers for i in result.matches["bullish_then_bearish"]] == [(0, 1)]
    assert chart_path.exists()
    assert "bullish_then_bearish" in capsys.readouterr().out
