#!/usr/bin/env python3
"""ICT site health check: delivery config, logs and simulation smoke test."""

import os
import sys

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from config.settings import LOGS_DIR, contact_settings_from_env
from core.contact import ConfigurationError
from core.mailer import build_mailer
from core.projector import project
from core.simulation import DEFAULT_SEED, SERIES_WINDOW, LiveBacktest


def check_delivery_config():
    """Report whether the configured mail backend has its credentials."""
    print("\n📬 Contact Delivery Configuration")
    print("=" * 70)

    settings = contact_settings_from_env()
    print(f"  Backend:   {settings.mail_backend}")
    print(f"  Timeout:   {settings.delivery_timeout:.1f}s")
    print(f"  Recipient: {', '.join(settings.recipients)}")

    try:
        build_mailer(settings)
    except ConfigurationError as e:
        print(f"  ✗ {e.message}")
        return False

    print("  ✓ Credentials present")
    return True


def check_logs():
    """Check recent log entries for errors."""
    print("\n📋 Recent Log Entries (last 10)")
    print("=" * 70)

    log_file = os.path.join(LOGS_DIR, "ui.log")
    if not os.path.exists(log_file):
        print("  No log file found yet.")
        return True

    try:
        with open(log_file, "r", encoding="utf-8") as f:
            lines = f.readlines()[-10:]
    except OSError as e:
        print(f"  Error reading logs: {e}")
        return False

    for line in lines:
        print(f"  {line.rstrip()}")
    return not any("| ERROR |" in line for line in lines)


def check_simulation():
    """Two streams with the same seed must agree tick for tick."""
    print("\n📈 Backtest Simulation Smoke Test")
    print("=" * 70)

    first = LiveBacktest(DEFAULT_SEED)
    second = LiveBacktest(DEFAULT_SEED)
    first.advance(200)
    second.advance(200)

    if first.series != second.series or first.stats != second.stats:
        print("  ✗ Same seed produced diverging series")
        return False
    if not 1 <= len(first.series) <= SERIES_WINDOW:
        print(f"  ✗ Series window out of bounds: {len(first.series)}")
        return False

    geometry = project(first.series)
    print(f"  ✓ Deterministic over 200 ticks | last=({geometry.last[0]:.2f}, {geometry.last[1]:.2f})")
    return True


def main():
    """Run all checks."""
    print("\n" + "=" * 70)
    print("  ICT Site Health Check")
    print("=" * 70)

    checks = [
        ("Delivery Config", check_delivery_config),
        ("Log Health", check_logs),
        ("Simulation", check_simulation),
    ]

    all_pass = True
    for name, check_func in checks:
        try:
            if not check_func():
                all_pass = False
        except Exception as e:
            print(f"\n❌ {name} check failed: {e}")
            all_pass = False

    print("\n" + "=" * 70)
    if all_pass:
        print("✓ All checks passed.")
    else:
        print("⚠ Some checks failed. Review above for details.")
    print("=" * 70 + "\n")

    return 0 if all_pass else 1


if __name__ == "__main__":
    sys.exit(main())
