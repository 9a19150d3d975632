"""Configuration helpers for pattern scans and chart defaults."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)


class BoundaryConvention(str, Enum):
    """Where the second stage of a sequential composition starts searching.

    ``EXCLUSIVE`` restarts on the bar after the pivot and requires the second
    match to begin on it. ``INCLUSIVE`` restarts on the pivot itself and
    requires both matches to share it as an anchor.
    """

    EXCLUSIVE = "exclusive"
    INCLUSIVE = "inclusive"


SEQUENCE_BOUNDARY = BoundaryConvention.EXCLUSIVE

CANDLE_WIDTH = 8
CANDLE_SPACE = 4
CHART_HEIGHT = 650
DEFAULT_MA_PERIOD = 25
DEFAULT_MAX_INSTANCES = 50


def _default_config_path(*parts: str) -> Path:
    return Path(__file__).resolve().parents[2].joinpath("config", *parts)


DEFAULT_SCAN_CONFIG = _default_config_path("scan.yaml")


@dataclass
class MovingAverageSpec:
    period: int = DEFAULT_MA_PERIOD
    field: str = "close"
    color: str = "yellow"


@dataclass
class ChartConfig:
    candle_width: int = CANDLE_WIDTH
    candle_space: int = CANDLE_SPACE
    height: int = CHART_HEIGHT
    moving_averages: List[MovingAverageSpec] = field(default_factory=lambda: [MovingAverageSpec()])


@dataclass
class NamedPattern:
    name: str
    definition: Dict[str, Any]


@dataclass
class ScanConfig:
    patterns: List[NamedPattern] = field(default_factory=list)
    boundary: BoundaryConvention = SEQUENCE_BOUNDARY
    max_instances: Optional[int] = DEFAULT_MAX_INSTANCES
    chart: ChartConfig = field(default_factory=ChartConfig)


def load_scan_config(path: Path = DEFAULT_SCAN_CONFIG) -> ScanConfig:
    data = _load_yaml(Path(path))
    boundary = BoundaryConvention(str(data.get("boundary", SEQUENCE_BOUNDARY.value)).lower())
    max_instances = data.get("max_instances", DEFAULT_MAX_INSTANCES)
    patterns = []
    for entry in data.get("patterns", []) or []:
        if "name" not in entry or "definition" not in entry:
            msg = f"Pattern entries in {path} need 'name' and 'definition'"
            logger.error(msg)
            raise KeyError(msg)
        patterns.append(NamedPattern(name=str(entry["name"]), definition=entry["definition"]))
    return ScanConfig(
        patterns=patterns,
        boundary=boundary,
        max_instances=int(max_instances) if max_instances is not None else None,
        chart=_parse_chart(data.get("chart", {}) or {}),
    )


def _parse_chart(data: Dict[str, Any]) -> ChartConfig:
    defaults = ChartConfig()
    averages = data.get("moving_averages")
    if averages is None:
        ma_specs = defaults.moving_averages
    else:
        ma_specs = [
            MovingAverageSpec(
                period=int(item.get("period", DEFAULT_MA_PERIOD)),
                field=str(item.get("field", "close")),
                color=str(item.get("color", "yellow")),
            )
            for item in averages
        ]
    return ChartConfig(
        candle_width=int(data.get("candle_width", defaults.candle_width)),
        candle_space=int(data.get("candle_space", defaults.candle_space)),
        height=int(data.get("height", defaults.height)),
        moving_averages=ma_specs,
    )


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path or not path.exists():
        msg = f"Scan configuration {path} not found"
        logger.error(msg)
        raise FileNotFoundError(msg)
    with path.open("r", encoding="utf-8") as fh:
        content = fh.read()
        try:
            return yaml.safe_load(content) or {}
        except yaml.YAMLError:
            return json.loads(content)
