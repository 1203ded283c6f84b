"""UI data models for the landing page."""

from __future__ import annotations

from dataclasses import dataclass

from core.projector import ChartGeometry, project
from core.scheduler import BacktestSnapshot
from ui.api import format_pct


@dataclass
class BacktestCardViewModel:
    """Server-rendered state of the live backtest card."""

    running: bool
    speed: int
    interval_ms: float
    month_ret_label: str
    month_ret_positive: bool
    win_rate_label: str
    risk_label: str
    max_dd_label: str
    chart: ChartGeometry

    @classmethod
    def from_snapshot(cls, snapshot: BacktestSnapshot) -> BacktestCardViewModel:
        stats = snapshot.stats
        return cls(
            running=snapshot.running,
            speed=snapshot.speed,
            interval_ms=round(snapshot.interval_seconds * 1000.0, 2),
            month_ret_label=format_pct(stats.month_ret),
            month_ret_positive=stats.month_ret >= 0,
            win_rate_label=f"{stats.win_rate:.1f}%",
            risk_label=f"{stats.risk:.0f}%",
            max_dd_label=f"{stats.max_dd:.1f}%",
            chart=project(snapshot.series),
        )
