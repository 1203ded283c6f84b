"""Static chart and export helpers for the simulated backtest series."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Sequence

from matplotlib.figure import Figure
import pandas as pd

from core.simulation import Stats
from ui.api import format_pct


def series_frame(series: Sequence[float], first_tick: int = 0) -> pd.DataFrame:
    """Tabulate the visible window with its tick index and step change."""
    frame = pd.DataFrame({"Tick": range(first_tick, first_tick + len(series)), "Value": list(series)})
    frame["Change"] = frame["Value"].diff()
    return frame


def _render_backtest_figure(series: Sequence[float], stats: Stats, title: str) -> Figure:
    fig = Figure(figsize=(8, 3.2))
    ax = fig.add_subplot(111)

    xs = list(range(len(series)))
    floor = min(series)
    ax.plot(xs, series, color="tab:green", linewidth=1.8, label="Equity")
    ax.fill_between(xs, series, floor, color="tab:green", alpha=0.15)
    ax.scatter([xs[-1]], [series[-1]], color="tab:green", s=30, zorder=3)

    ax.set_title(title)
    ax.set_ylabel("Value")
    ax.set_xlabel(
        f"Monthly {format_pct(stats.month_ret)} | Win rate {stats.win_rate:.1f}% | "
        f"Risk {stats.risk:.0f}% | Max DD {stats.max_dd:.1f}%"
    )
    ax.grid(alpha=0.25)
    fig.tight_layout()
    return fig


def plot_backtest_chart(
    series: Sequence[float],
    stats: Stats,
    output_path: Path,
    title: str = "Model Backtest (simulation)",
) -> None:
    """Save a static PNG of the simulated series."""
    if not series:
        raise ValueError("Cannot plot an empty series.")
    fig = _render_backtest_figure(series, stats, title)
    fig.savefig(output_path, dpi=130)


def backtest_chart_png(series: Sequence[float], stats: Stats, title: str = "Model Backtest (simulation)") -> bytes:
    """Render the simulated series to PNG bytes for HTTP responses."""
    if not series:
        raise ValueError("Cannot plot an empty series.")
    buffer = io.BytesIO()
    fig = _render_backtest_figure(series, stats, title)
    fig.savefig(buffer, format="png", dpi=110)
    return buffer.getvalue()
