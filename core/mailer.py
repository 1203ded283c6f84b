"""Outbound delivery backends for contact emails."""

from __future__ import annotations

from email.message import EmailMessage
import logging
import smtplib
from typing import Protocol

import requests

from config.settings import MAIL_BACKEND_RESEND, MAIL_BACKEND_SMTP, ContactSettings
from core.contact import ConfigurationError, DeliveryError, OutboundEmail

LOGGER = logging.getLogger("ict.mailer")


class Mailer(Protocol):
    def send(self, email: OutboundEmail) -> str | None: ...


class ResendMailer:
    """Send through the Resend HTTP API with a bounded request timeout."""

    def __init__(self, api_key: str, api_url: str, timeout: float) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout = timeout

    def send(self, email: OutboundEmail) -> str | None:
        body = {
            "from": email.sender,
            "to": list(email.to),
            "reply_to": email.reply_to,
            "subject": email.subject,
            "text": email.text,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.post(self._api_url, json=body, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise DeliveryError(details=str(exc)[:200]) from exc

        if response.status_code >= 400:
            raise DeliveryError(details=_provider_message(response))

        try:
            payload = response.json()
        except ValueError:
            return None
        return payload.get("id") if isinstance(payload, dict) else None


def _provider_message(response: requests.Response) -> str:
    """Pick the provider's error text, falling back to the HTTP status."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])[:200]
    return f"HTTP {response.status_code}"


class SmtpMailer:
    """Send through an SMTP relay with STARTTLS."""

    def __init__(self, host: str, port: int, user: str, password: str, timeout: float) -> None:
        self._host = host
        self._port = port
        self._user = user
        self._password = password
        self._timeout = timeout

    def send(self, email: OutboundEmail) -> str | None:
        msg = EmailMessage()
        msg["Subject"] = email.subject
        msg["From"] = email.sender
        msg["To"] = ", ".join(email.to)
        msg["Reply-To"] = email.reply_to
        msg.set_content(email.text)

        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.starttls()
                server.login(self._user, self._password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(details=str(exc)[:200]) from exc
        return None


def build_mailer(settings: ContactSettings) -> Mailer:
    """Create the configured backend or raise ``ConfigurationError``."""
    if settings.mail_backend == MAIL_BACKEND_RESEND:
        if not settings.resend_api_key:
            LOGGER.error("RESEND_API_KEY is not set; contact emails cannot be delivered")
            raise ConfigurationError("RESEND_API_KEY not configured")
        return ResendMailer(settings.resend_api_key, settings.resend_api_url, settings.delivery_timeout)

    if settings.mail_backend == MAIL_BACKEND_SMTP:
        if not all([settings.smtp_host, settings.smtp_user, settings.smtp_password]):
            LOGGER.error("SMTP delivery selected but ICT_SMTP_HOST/USER/PASS are incomplete")
            raise ConfigurationError("SMTP credentials not configured")
        return SmtpMailer(
            settings.smtp_host,
            settings.smtp_port,
            settings.smtp_user,
            settings.smtp_password,
            settings.delivery_timeout,
        )

    raise ConfigurationError(f"Unknown mail backend: {settings.mail_backend}")
