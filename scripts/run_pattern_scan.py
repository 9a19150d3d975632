"""Scan a price CSV for configured candlestick patterns."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from candlepl.bars import load_bars_csv
from candlepl.config import DEFAULT_SCAN_CONFIG, load_scan_config
from candlepl.pipeline import ScanResult, run_scan
from candlepl.reporting import render_chart

logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(message)s")
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan price history for patterns")
    parser.add_argument("csv", type=Path, help="Path to Date,Open,High,Low,Close,Volume,Adj Close CSV")
    parser.add_argument("--config", type=Path, default=DEFAULT_SCAN_CONFIG, help="Scan configuration YAML")
    parser.add_argument("--days", type=int, default=None, help="Only scan the most recent N bars")
    parser.add_argument("--chart", type=Path, default=None, help="Optional SVG output path")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> ScanResult:
    args = parse_args(argv)
    config = load_scan_config(args.config)
    series = load_bars_csv(args.csv, days=args.days)
    result = run_scan(series, config)
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(result.summary())
    if args.chart is not None:
        render_chart(series, args.chart, result.all_instances(), config.chart)
    else:
        logger.info("No chart requested")
    return result


if __name__ == "__main__":
    main()
