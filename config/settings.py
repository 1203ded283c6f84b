import math
import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Project root directory
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Local .env carries the delivery credentials during development
load_dotenv(os.path.join(BASE_DIR, ".env"))

LOGS_DIR = os.path.join(BASE_DIR, "logs")

SERVER_HOST = os.environ.get("ICT_HOST", "127.0.0.1")
SERVER_PORT = int(os.environ.get("ICT_PORT", "5000"))

CONTACT_SENDER = "ICT Website <onboarding@resend.dev>"
CONTACT_RECIPIENTS = ("admin@icttradinghub.com",)
CONTACT_SUBJECT = "New Contact Form Submission"

RESEND_API_URL = "https://api.resend.com/emails"
DELIVERY_TIMEOUT_SECONDS = 10.0
DELIVERY_TIMEOUT_MAX_SECONDS = 60.0

MAIL_BACKEND_RESEND = "resend"
MAIL_BACKEND_SMTP = "smtp"


@dataclass(frozen=True)
class ContactSettings:
    """Delivery configuration resolved from the process environment."""

    mail_backend: str = MAIL_BACKEND_RESEND
    resend_api_key: str | None = None
    resend_api_url: str = RESEND_API_URL
    delivery_timeout: float = DELIVERY_TIMEOUT_SECONDS
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    sender: str = CONTACT_SENDER
    recipients: tuple[str, ...] = CONTACT_RECIPIENTS
    subject: str = CONTACT_SUBJECT


def parse_float(raw_value: str | None, default: float, min_value: float, max_value: float) -> float:
    """Parse bounded float from environment values."""
    try:
        value = float(raw_value) if raw_value is not None else default
    except (TypeError, ValueError):
        value = default
    if math.isnan(value):
        value = default
    return max(min_value, min(max_value, value))


def contact_settings_from_env() -> ContactSettings:
    """Read delivery settings at call time so credential changes apply without restart."""
    backend = (os.environ.get("ICT_MAIL_BACKEND") or MAIL_BACKEND_RESEND).strip().lower()
    try:
        smtp_port = int(os.environ.get("ICT_SMTP_PORT", "587"))
    except ValueError:
        smtp_port = 587

    return ContactSettings(
        mail_backend=backend,
        resend_api_key=os.environ.get("RESEND_API_KEY") or None,
        resend_api_url=os.environ.get("ICT_RESEND_API_URL", RESEND_API_URL),
        delivery_timeout=parse_float(
            os.environ.get("ICT_DELIVERY_TIMEOUT"),
            DELIVERY_TIMEOUT_SECONDS,
            1.0,
            DELIVERY_TIMEOUT_MAX_SECONDS,
        ),
        smtp_host=os.environ.get("ICT_SMTP_HOST") or None,
        smtp_port=smtp_port,
        smtp_user=os.environ.get("ICT_SMTP_USER") or None,
        smtp_password=os.environ.get("ICT_SMTP_PASS") or None,
    )
