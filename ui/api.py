"""Request parsing and payload helpers for ICT UI API routes."""

from __future__ import annotations

from typing import Any

from core.projector import ChartGeometry, project
from core.scheduler import BacktestSnapshot
from core.simulation import Stats


def parse_int(raw_value: Any, default: int, min_value: int, max_value: int) -> int:
    """Parse bounded int from request args or JSON."""
    try:
        value = int(raw_value) if raw_value is not None else default
    except (TypeError, ValueError):
        value = default
    return max(min_value, min(max_value, value))


def parse_bool(raw_value: Any, default: bool) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    if isinstance(raw_value, str):
        lowered = raw_value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return default


def format_pct(value: float) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.2f}%"


def serialize_stats(stats: Stats) -> dict[str, Any]:
    return {
        "win_rate": stats.win_rate,
        "risk": stats.risk,
        "max_dd": stats.max_dd,
        "month_ret": stats.month_ret,
        "display": {
            "win_rate": f"{stats.win_rate:.1f}%",
            "risk": f"{stats.risk:.0f}%",
            "max_dd": f"{stats.max_dd:.1f}%",
            "month_ret": format_pct(stats.month_ret),
        },
    }


def serialize_geometry(geometry: ChartGeometry) -> dict[str, Any]:
    return {
        "width": geometry.width,
        "height": geometry.height,
        "padding": geometry.padding,
        "points": geometry.points_attr(),
        "area": geometry.area_attr(),
        "baseline": geometry.baseline_attr(),
        "last": {"x": round(geometry.last[0], 2), "y": round(geometry.last[1], 2)},
    }


def backtest_payload(snapshot: BacktestSnapshot) -> dict[str, Any]:
    """Convert a scheduler snapshot to the live card API payload."""
    return {
        "seed": snapshot.seed,
        "ticks": snapshot.ticks,
        "running": snapshot.running,
        "speed": snapshot.speed,
        "interval_ms": round(snapshot.interval_seconds * 1000.0, 2),
        "series": list(snapshot.series),
        "stats": serialize_stats(snapshot.stats),
        "chart": serialize_geometry(project(snapshot.series)),
    }
