"""Project a price series into screen-space chart coordinates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

CHART_WIDTH = 220
CHART_HEIGHT = 80
CHART_PADDING = 8
MIN_SPAN = 1e-6

Point = tuple[float, float]


@dataclass(frozen=True)
class ChartGeometry:
    """Line, fill polygon and last-point marker for one series snapshot."""

    width: float
    height: float
    padding: float
    points: tuple[Point, ...]
    area: tuple[Point, ...]
    last: Point

    @property
    def baseline(self) -> tuple[Point, Point]:
        floor = self.height - self.padding
        return (self.padding, floor), (self.width - self.padding, floor)

    def points_attr(self) -> str:
        return _format_points(self.points)

    def area_attr(self) -> str:
        return _format_points(self.area)

    def baseline_attr(self) -> str:
        return _format_points(self.baseline)


def _format_points(points: Sequence[Point]) -> str:
    return " ".join(f"{x:.2f},{y:.2f}" for x, y in points)


def project(
    series: Sequence[float],
    width: float = CHART_WIDTH,
    height: float = CHART_HEIGHT,
    padding: float = CHART_PADDING,
) -> ChartGeometry:
    """Map values onto a ``width`` x ``height`` viewport, y growing downward.

    A one-value series has no horizontal extent, so its single point sits at
    the horizontal centre.
    """
    values = np.asarray(series, dtype=float)
    if values.size == 0:
        raise ValueError("Cannot project an empty series.")

    low = float(values.min())
    high = float(values.max())
    span = max(MIN_SPAN, high - low)

    if values.size == 1:
        xs = np.array([width / 2.0])
    else:
        xs = (np.arange(values.size) / (values.size - 1)) * (width - padding * 2) + padding
    ys = height - ((values - low) / span) * (height - padding * 2) - padding

    points = tuple((float(x), float(y)) for x, y in zip(xs, ys))
    floor = height - padding
    area = ((padding, floor),) + points + ((width - padding, floor),)

    return ChartGeometry(
        width=width,
        height=height,
        padding=padding,
        points=points,
        area=area,
        last=points[-1],
    )
