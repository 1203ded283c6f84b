"""Flask app for the ICT landing page, live backtest card and contact relay."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import sys
import tempfile
from typing import Any, Callable

MPL_CONFIG_DIR = os.path.join(tempfile.gettempdir(), "matplotlib")
os.environ.setdefault("MPLCONFIGDIR", MPL_CONFIG_DIR)
os.makedirs(MPL_CONFIG_DIR, exist_ok=True)

import matplotlib

matplotlib.use("Agg")

from flask import Flask, Response, got_request_exception, jsonify, render_template, request
from flask_cors import CORS

# Make `python ui/app.py` work without external PYTHONPATH setup.
THIS_DIR = Path(__file__).resolve().parent
PROJECT_DIR = THIS_DIR.parent
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from config.settings import BASE_DIR, LOGS_DIR, SERVER_HOST, SERVER_PORT, ContactSettings, contact_settings_from_env
from core.contact import ContactError, relay_contact
from core.mailer import Mailer, build_mailer
from core.scheduler import ALLOWED_SPEEDS, TickScheduler
from core.simulation import DEFAULT_SEED, LiveBacktest
from ui.api import backtest_payload, parse_bool, parse_int
from ui.charts import backtest_chart_png
from ui.models import BacktestCardViewModel


BASE_PATH = Path(BASE_DIR)
UI_DIR = BASE_PATH / "ui"
STATIC_DIR = UI_DIR / "static"

CONTACT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def _configure_ui_logger() -> logging.Logger:
    """Configure file logger for UI app, relay and ticker threads."""
    logs_dir = Path(LOGS_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "ui.log"

    logger = logging.getLogger("ict")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    existing = None
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler):
            existing = handler
            break

    if existing is None:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    return logging.getLogger("ict.ui")


def _warn_if_multi_worker(logger: logging.Logger) -> None:
    """Log warning when likely deployed with multiple workers/processes."""
    worker_envs = {
        "WEB_CONCURRENCY": os.getenv("WEB_CONCURRENCY"),
        "GUNICORN_WORKERS": os.getenv("GUNICORN_WORKERS"),
        "WORKERS": os.getenv("WORKERS"),
    }
    for key, raw_value in worker_envs.items():
        if raw_value is None:
            continue
        try:
            workers = int(raw_value)
        except ValueError:
            continue
        if workers > 1:
            logger.warning(
                "Detected %s=%s. Each worker runs its own backtest ticker; previews will diverge.",
                key,
                raw_value,
            )
            return


def create_app(
    contact_settings: ContactSettings | None = None,
    mailer_factory: Callable[[ContactSettings], Mailer] | None = None,
    autostart: bool | None = None,
    seed: int = DEFAULT_SEED,
) -> Flask:
    """Create and configure the Flask application.

    ``contact_settings`` pins delivery configuration; by default it is read
    from the environment on every request.
    """
    app = Flask(
        __name__,
        template_folder=str(UI_DIR / "templates"),
        static_folder=str(STATIC_DIR),
    )
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    logger = _configure_ui_logger()
    _warn_if_multi_worker(logger)

    if autostart is None:
        autostart = parse_bool(os.getenv("ICT_BACKTEST_AUTOSTART"), True)

    scheduler = TickScheduler(LiveBacktest(seed))
    if autostart:
        scheduler.play()
    app.extensions["ict_scheduler"] = scheduler

    build = mailer_factory or build_mailer
    logger.info("UI app initialized (autostart=%s, seed=%s)", autostart, seed)

    def _contact_settings() -> ContactSettings:
        return contact_settings if contact_settings is not None else contact_settings_from_env()

    def _control_payload() -> dict[str, Any]:
        payload = request.get_json(silent=True)
        return payload if isinstance(payload, dict) else {}

    @app.route("/")
    def index() -> str:
        """Landing page with the server-rendered backtest card."""
        card = BacktestCardViewModel.from_snapshot(scheduler.snapshot())
        return render_template("index.html", card=card, speeds=ALLOWED_SPEEDS)

    @app.route("/api/health")
    def health():
        return jsonify({"ok": True})

    @app.route("/api/contact", methods=CONTACT_METHODS)
    def contact():
        """Relay one contact form submission by email."""
        payload = request.get_json(silent=True) if request.method == "POST" else None
        result = relay_contact(request.method, payload, _contact_settings(), build)
        return jsonify(result)

    @app.route("/api/backtest")
    def backtest_state():
        return jsonify(backtest_payload(scheduler.snapshot()))

    @app.route("/api/backtest/control", methods=["POST"])
    def backtest_control():
        """Change run state and/or speed; each change restarts the ticker."""
        payload = _control_payload()
        if "speed" in payload:
            speed = parse_int(payload.get("speed"), scheduler.speed, min(ALLOWED_SPEEDS), max(ALLOWED_SPEEDS))
            scheduler.set_speed(speed)
        if parse_bool(payload.get("toggle"), False):
            scheduler.toggle()
        elif "running" in payload:
            if parse_bool(payload.get("running"), scheduler.running):
                scheduler.play()
            else:
                scheduler.pause()
        return jsonify(backtest_payload(scheduler.snapshot()))

    @app.route("/api/backtest/reset", methods=["POST"])
    def backtest_reset():
        payload = _control_payload()
        new_seed = parse_int(payload.get("seed"), scheduler.snapshot().seed, 0, 0xFFFFFFFF)
        scheduler.reseed(new_seed)
        logger.info("Backtest reset via API (seed=%s)", new_seed)
        return jsonify(backtest_payload(scheduler.snapshot()))

    @app.route("/api/backtest/chart.png")
    def backtest_chart():
        snapshot = scheduler.snapshot()
        image = backtest_chart_png(snapshot.series, snapshot.stats)
        return Response(image, mimetype="image/png", headers={"Cache-Control": "no-store"})

    @app.errorhandler(ContactError)
    def _contact_error(error: ContactError):
        if error.status_code >= 500:
            logger.warning("Contact relay error (%s): %s", error.status_code, error.details or error.message)
        return jsonify(error.to_payload()), error.status_code

    def _log_unhandled_exception(sender: Flask, exception: Exception, **_: Any) -> None:
        logger.exception("Unhandled UI exception: %s", exception)

    got_request_exception.connect(_log_unhandled_exception, app)

    return app


app = create_app()


if __name__ == "__main__":
    app.run(host=SERVER_HOST, port=SERVER_PORT, debug=False)
