"""Run configured pattern searches over a bar series."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import Dict, List

import pandas as pd

from candlepl.bars.series import BarSeries
from candlepl.config import ScanConfig
from candlepl.dsl import build_pattern
from candlepl.dsl.instances import PatternInstance

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["pattern", "first", "last", "length", "anchors"]


@dataclass
class ScanResult:
    matches: Dict[str, List[PatternInstance]] = field(default_factory=dict)

    def summary(self) -> pd.DataFrame:
        rows = [
            {
                "pattern": name,
                "first": instance.span.first,
                "last": instance.span.last,
                "length": instance.length,
                "anchors": list(instance.anchor_numbers),
            }
            for name, instances in self.matches.items()
            for instance in instances
        ]
        return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)

    def all_instances(self) -> List[PatternInstance]:
        return [instance for instances in self.matches.values() for instance in instances]


def run_scan(series: BarSeries, config: ScanConfig) -> ScanResult:
    """Search every configured pattern, keeping at most ``max_instances`` each."""
    result = ScanResult()
    for named in config.patterns:
        pattern = build_pattern(named.definition, boundary=config.boundary)
        stream = pattern.search(series)
        found = list(islice(stream, config.max_instances)) if config.max_instances is not None else stream.to_list()
        logger.info("Pattern %s: %d matches", named.name, len(found))
        result.matches[named.name] = found
    return result
