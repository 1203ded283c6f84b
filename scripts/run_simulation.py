import argparse
import datetime
import logging
import os
import sys
from pathlib import Path

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

import matplotlib

matplotlib.use("Agg")

from core.projector import project
from core.simulation import DEFAULT_SEED, SERIES_SEED_LENGTH, LiveBacktest
from ui.api import format_pct
from ui.charts import plot_backtest_chart, series_frame


def _configure_logging():
    """Configure file logging for local runs."""
    logs_dir = os.path.join(BASE_DIR, "logs")
    os.makedirs(logs_dir, exist_ok=True)

    log_file = os.path.join(logs_dir, "ict.log")
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def main(argv: list[str] | None = None):
    _configure_logging()
    logger = logging.getLogger("ict.runner")

    parser = argparse.ArgumentParser(description="Run the live backtest simulation offline")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help=f"Stream seed (default: {DEFAULT_SEED})")
    parser.add_argument("--ticks", type=int, default=100, help="Number of ticks to run (default: 100)")
    parser.add_argument("--csv", type=Path, default=None, help="Write the visible series window to this CSV file")
    parser.add_argument("--png", type=Path, default=None, help="Write a static chart of the series to this PNG file")
    args = parser.parse_args(argv)

    if args.ticks < 0:
        parser.error("--ticks must be zero or positive")

    start_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Simulation started at %s (seed=%s, ticks=%s)", start_time.isoformat(), args.seed, args.ticks)

    backtest = LiveBacktest(args.seed)
    series, stats = backtest.advance(args.ticks)
    geometry = project(series)

    print(f"Seed: {backtest.seed} | Ticks: {backtest.ticks} | Window: {len(series)}")
    print(f"Last value: {series[-1]:.4f}")
    print(f"Monthly: {format_pct(stats.month_ret)}")
    print(f"Win rate: {stats.win_rate:.1f}% | Risk / trade: {stats.risk:.0f}% | Max DD: {stats.max_dd:.1f}%")
    print(f"Marker: ({geometry.last[0]:.2f}, {geometry.last[1]:.2f})")

    first_tick = max(0, backtest.ticks + SERIES_SEED_LENGTH - len(series))
    if args.csv:
        series_frame(series, first_tick=first_tick).to_csv(args.csv, index=False)
        logger.info("Wrote series CSV: %s", args.csv)
        print(f"CSV: {args.csv}")
    if args.png:
        plot_backtest_chart(series, stats, args.png)
        logger.info("Wrote chart PNG: %s", args.png)
        print(f"Chart: {args.png}")

    end_time = datetime.datetime.now(datetime.timezone.utc)
    logger.info("Simulation ended at %s", end_time.isoformat())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
