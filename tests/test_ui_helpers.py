"""Tests for UI payload helpers, chart exports and delivery settings."""

from __future__ import annotations

import pytest

from config.settings import DELIVERY_TIMEOUT_SECONDS, contact_settings_from_env, parse_float
from core.simulation import LiveBacktest, Stats
from ui.api import format_pct, parse_bool, parse_int
from ui.charts import backtest_chart_png, plot_backtest_chart, series_frame

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("value", "expected"),
    [(2.1, "+2.10%"), (0.0, "+0.00%"), (-1.056, "-1.06%"), (6.5, "+6.50%")],
)
def test_format_pct(value, expected) -> None:
    assert format_pct(value) == expected


def test_parse_int_clamps_and_defaults() -> None:
    assert parse_int("3", 1, 1, 4) == 3
    assert parse_int("12", 1, 1, 4) == 4
    assert parse_int("abc", 2, 1, 4) == 2
    assert parse_int(None, 2, 1, 4) == 2


def test_parse_float_handles_nan() -> None:
    assert parse_float("nan", 10.0, 1.0, 60.0) == 10.0
    assert parse_float("0.2", 10.0, 1.0, 60.0) == 1.0


def test_parse_bool() -> None:
    assert parse_bool(True, False) is True
    assert parse_bool("off", True) is False
    assert parse_bool("maybe", True) is True
    assert parse_bool(None, False) is False


def test_series_frame_columns() -> None:
    frame = series_frame([1.0, 1.5, 1.25], first_tick=10)
    assert list(frame.columns) == ["Tick", "Value", "Change"]
    assert frame["Tick"].tolist() == [10, 11, 12]
    assert frame["Change"].iloc[1] == pytest.approx(0.5)


def test_plot_backtest_chart_writes_png(tmp_path) -> None:
    backtest = LiveBacktest()
    series, stats = backtest.advance(30)
    output = tmp_path / "backtest.png"
    plot_backtest_chart(series, stats, output)
    assert output.read_bytes().startswith(b"\x89PNG")


def test_chart_rejects_empty_series() -> None:
    with pytest.raises(ValueError):
        backtest_chart_png([], Stats())


def test_contact_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RESEND_API_KEY", "re_env")
    monkeypatch.setenv("ICT_MAIL_BACKEND", " SMTP ")
    monkeypatch.setenv("ICT_DELIVERY_TIMEOUT", "999")
    monkeypatch.setenv("ICT_SMTP_PORT", "not-a-port")

    settings = contact_settings_from_env()
    assert settings.resend_api_key == "re_env"
    assert settings.mail_backend == "smtp"
    assert settings.delivery_timeout == 60.0
    assert settings.smtp_port == 587


def test_contact_settings_timeout_ignores_nan(monkeypatch) -> None:
    monkeypatch.setenv("ICT_DELIVERY_TIMEOUT", "nan")
    assert contact_settings_from_env().delivery_timeout == DELIVERY_TIMEOUT_SECONDS

    monkeypatch.setenv("ICT_DELIVERY_TIMEOUT", "2.5")
    assert contact_settings_from_env().delivery_timeout == 2.5


def test_contact_settings_defaults(monkeypatch) -> None:
    for name in ("RESEND_API_KEY", "ICT_MAIL_BACKEND", "ICT_DELIVERY_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    settings = contact_settings_from_env()
    assert settings.resend_api_key is None
    assert settings.mail_backend == "resend"
    assert settings.delivery_timeout == DELIVERY_TIMEOUT_SECONDS
