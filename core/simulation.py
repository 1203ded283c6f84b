"""Simulated price series and summary stats for the live backtest card."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging

from core.rng import SeededStream

DEFAULT_SEED = 20251215
SERIES_WINDOW = 80
SERIES_SEED_LENGTH = 60
SERIES_START_VALUE = 100.0
SEED_BIAS = 0.47
SEED_STEP_SCALE = 0.8

DRIFT = 0.06
SHOCK_SCALE = 1.2
MEAN_REVERT_LOOKBACK = 20
MEAN_REVERT_STRENGTH = 0.01

WIN_RATE_RANGE = (45.0, 60.0)
MAX_DD_RANGE = (3.5, 10.5)
MONTH_RET_RANGE = (-3.5, 6.5)

LOGGER = logging.getLogger("ict.simulation")


@dataclass(frozen=True)
class Stats:
    """Headline numbers shown under the chart."""

    win_rate: float = 52.0
    risk: float = 1.0
    max_dd: float = 6.4
    month_ret: float = 2.1


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def seed_series(
    stream: SeededStream,
    length: int = SERIES_SEED_LENGTH,
    start: float = SERIES_START_VALUE,
) -> tuple[float, ...]:
    """Draw a gentle uptrend to pre-fill the chart before the first tick."""
    values: list[float] = []
    value = start
    for _ in range(length):
        value += (stream.next() - SEED_BIAS) * SEED_STEP_SCALE
        values.append(value)
    return tuple(values)


def tick(
    series: tuple[float, ...],
    stats: Stats,
    r: float,
    r2: float,
) -> tuple[tuple[float, ...], Stats]:
    """Apply one timer step: random walk with drift and mild mean reversion.

    ``r`` drives the price shock and the win-rate/monthly-return drift, ``r2``
    only the drawdown figure. The window keeps the newest ``SERIES_WINDOW``
    values.
    """
    if not series:
        raise ValueError("Series must hold at least one value.")

    last = series[-1]
    anchor = series[max(0, len(series) - MEAN_REVERT_LOOKBACK)]
    shock = (r - 0.5) * SHOCK_SCALE
    mean_revert = (anchor - last) * MEAN_REVERT_STRENGTH
    next_value = last + DRIFT + shock + mean_revert

    next_series = series + (next_value,)
    if len(next_series) > SERIES_WINDOW:
        next_series = next_series[-SERIES_WINDOW:]

    next_stats = replace(
        stats,
        win_rate=clamp(stats.win_rate + (r - 0.5) * 0.25, *WIN_RATE_RANGE),
        max_dd=clamp(stats.max_dd + (r2 - 0.5) * 0.18, *MAX_DD_RANGE),
        month_ret=clamp(stats.month_ret + (r - 0.46) * 0.22, *MONTH_RET_RANGE),
    )
    return next_series, next_stats


class LiveBacktest:
    """Owns one seeded stream together with the series and stats it drives."""

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self._reset(seed)

    def _reset(self, seed: int) -> None:
        self._stream = SeededStream(seed)
        self._series = seed_series(self._stream)
        self._stats = Stats()
        self._ticks = 0

    @property
    def seed(self) -> int:
        return self._stream.seed

    @property
    def series(self) -> tuple[float, ...]:
        return self._series

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def ticks(self) -> int:
        return self._ticks

    def advance(self, steps: int = 1) -> tuple[tuple[float, ...], Stats]:
        """Run ``steps`` ticks, drawing the price draw before the drawdown draw."""
        for _ in range(steps):
            r = self._stream.next()
            r2 = self._stream.next()
            self._series, self._stats = tick(self._series, self._stats, r, r2)
            self._ticks += 1
        return self._series, self._stats

    def reseed(self, seed: int) -> None:
        """Start over from a fresh, independent stream."""
        LOGGER.info("Reseeding backtest stream (seed=%s, previous ticks=%s)", seed, self._ticks)
        self._reset(seed)
