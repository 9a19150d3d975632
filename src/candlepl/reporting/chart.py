"""Render bars, moving averages, and pattern matches as an SVG chart."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from candlepl.bars.series import BarSeries
from candlepl.config import ChartConfig
from candlepl.dsl.instances import PatternInstance
from candlepl.features import moving_average

logger = logging.getLogger(__name__)

BEARISH_COLOR = "red"
BULLISH_COLOR = "green"
BULLISH_FILL = "black"
BACKGROUND = "black"
MATCH_COLOR = "deepskyblue"
DPI = 100


def render_chart(
    series: BarSeries,
    path: Path,
    instances: Iterable[PatternInstance] = (),
    config: ChartConfig | None = None,
) -> Path:
    """Draw ``series`` and the given matches into an SVG file at ``path``."""
    config = config or ChartConfig()
    if not len(series):
        raise ValueError("Cannot chart an empty series")
    pitch = config.candle_width + config.candle_space
    width_px = max(len(series) * pitch, pitch)
    fig = Figure(figsize=(width_px / DPI, config.height / DPI), dpi=DPI, facecolor=BACKGROUND)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_facecolor(BACKGROUND)
    ax.set_axis_off()

    body_width = config.candle_width / pitch
    for pos, bar in enumerate(series):
        bearish = bar.open > bar.close
        edge = BEARISH_COLOR if bearish else BULLISH_COLOR
        fill = BEARISH_COLOR if bearish else BULLISH_FILL
        bottom = min(bar.open, bar.close)
        ax.plot([pos, pos], [bar.low, bar.high], color=edge, linewidth=1)
        ax.add_patch(
            Rectangle(
                (pos - body_width / 2, bottom),
                body_width,
                abs(bar.close - bar.open),
                facecolor=fill,
                edgecolor=edge,
                linewidth=1,
            )
        )

    positions = {bar.number: pos for pos, bar in enumerate(series)}
    for spec in config.moving_averages:
        if spec.period > len(series):
            logger.warning("Skipping %d-bar moving average on %d bars", spec.period, len(series))
            continue
        average = moving_average(series, spec.period, spec.field).dropna()
        ax.plot([positions[number] for number in average.index], average.to_numpy(), color=spec.color, linewidth=1.5)

    drawn = 0
    for instance in instances:
        first = positions.get(instance.span.first)
        last = positions.get(instance.span.last)
        if first is None or last is None:
            logger.warning("Match %s..%s lies outside the charted bars", instance.span.first, instance.span.last)
            continue
        ax.axvspan(first - 0.5, last + 0.5, color=MATCH_COLOR, alpha=0.15)
        ax.plot(
            [positions[bar.number] for bar in instance.anchors],
            [bar.close for bar in instance.anchors],
            color=MATCH_COLOR,
            linewidth=1,
            marker="o",
            markersize=3,
        )
        drawn += 1

    lows = min(bar.low for bar in series)
    highs = max(bar.high for bar in series)
    margin = (highs - lows) * 0.05 or 1.0
    ax.set_xlim(-1, len(series))
    ax.set_ylim(lows - margin, highs + margin)

    path = Path(path)
    fig.savefig(path, format="svg", facecolor=BACKGROUND)
    logger.info("Wrote chart with %d bars and %d matches to %s", len(series), drawn, path)
    return path
