"""Tests for the Resend and SMTP delivery backends."""

from __future__ import annotations

import pytest
import requests

from config.settings import ContactSettings
from core import mailer as mailer_module
from core.contact import ConfigurationError, DeliveryError, OutboundEmail
from core.mailer import ResendMailer, SmtpMailer, build_mailer

pytestmark = pytest.mark.unit

EMAIL = OutboundEmail(
    sender="ICT Website <onboarding@resend.dev>",
    to=("admin@icttradinghub.com",),
    reply_to="a@b.com",
    subject="New Contact Form Submission",
    text="Name: -\nEmail: a@b.com\nExperience: -\n\nMessage:\nhi",
)


class FakeResponse:
    def __init__(self, status_code: int, payload=None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_resend_posts_json_with_bearer_and_timeout(monkeypatch) -> None:
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return FakeResponse(200, {"id": "msg_123"})

    monkeypatch.setattr(mailer_module.requests, "post", fake_post)

    sender = ResendMailer("re_key", "https://api.resend.com/emails", timeout=7.5)
    assert sender.send(EMAIL) == "msg_123"

    call = calls[0]
    assert call["url"] == "https://api.resend.com/emails"
    assert call["timeout"] == 7.5
    assert call["headers"]["Authorization"] == "Bearer re_key"
    assert call["json"] == {
        "from": EMAIL.sender,
        "to": ["admin@icttradinghub.com"],
        "reply_to": "a@b.com",
        "subject": "New Contact Form Submission",
        "text": EMAIL.text,
    }


@pytest.mark.parametrize("payload", [["ok"], "queued", 1, {"status": "queued"}, None])
def test_resend_accepted_without_id_returns_none(monkeypatch, payload) -> None:
    monkeypatch.setattr(mailer_module.requests, "post", lambda *args, **kwargs: FakeResponse(200, payload))
    assert ResendMailer("re_key", "https://api.resend.com/emails", timeout=10.0).send(EMAIL) is None


def test_resend_error_status_raises_delivery_error(monkeypatch) -> None:
    monkeypatch.setattr(
        mailer_module.requests,
        "post",
        lambda *args, **kwargs: FakeResponse(422, {"message": "Invalid `to` field."}),
    )
    with pytest.raises(DeliveryError) as excinfo:
        ResendMailer("re_key", "https://api.resend.com/emails", timeout=5).send(EMAIL)
    assert excinfo.value.details == "Invalid `to` field."


def test_resend_error_without_body_reports_status(monkeypatch) -> None:
    monkeypatch.setattr(mailer_module.requests, "post", lambda *args, **kwargs: FakeResponse(503))
    with pytest.raises(DeliveryError) as excinfo:
        ResendMailer("re_key", "https://api.resend.com/emails", timeout=5).send(EMAIL)
    assert excinfo.value.details == "HTTP 503"


def test_resend_timeout_raises_delivery_error(monkeypatch) -> None:
    def fake_post(*args, **kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(mailer_module.requests, "post", fake_post)
    with pytest.raises(DeliveryError) as excinfo:
        ResendMailer("re_key", "https://api.resend.com/emails", timeout=5).send(EMAIL)
    assert "timed out" in excinfo.value.details


class FakeSMTP:
    instances: list[FakeSMTP] = []

    def __init__(self, host, port, timeout=None) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.logged_in = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


def test_smtp_sends_with_starttls(monkeypatch) -> None:
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)

    SmtpMailer("smtp.example.com", 587, "user", "secret", timeout=4).send(EMAIL)

    server = FakeSMTP.instances[0]
    assert (server.host, server.port, server.timeout) == ("smtp.example.com", 587, 4)
    assert server.started_tls is True
    assert server.logged_in == ("user", "secret")
    msg = server.messages[0]
    assert msg["Reply-To"] == "a@b.com"
    assert msg["Subject"] == "New Contact Form Submission"
    assert "Experience: -" in msg.get_content()


def test_smtp_failure_raises_delivery_error(monkeypatch) -> None:
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(mailer_module.smtplib, "SMTP", refuse)
    with pytest.raises(DeliveryError):
        SmtpMailer("smtp.example.com", 587, "user", "secret", timeout=4).send(EMAIL)


def test_build_mailer_requires_resend_key() -> None:
    with pytest.raises(ConfigurationError):
        build_mailer(ContactSettings(resend_api_key=None))
    assert isinstance(build_mailer(ContactSettings(resend_api_key="re_key")), ResendMailer)


def test_build_mailer_requires_smtp_credentials() -> None:
    with pytest.raises(ConfigurationError):
        build_mailer(ContactSettings(mail_backend="smtp", smtp_host="smtp.example.com"))
    configured = ContactSettings(
        mail_backend="smtp",
        smtp_host="smtp.example.com",
        smtp_user="user",
        smtp_password="secret",
    )
    assert isinstance(build_mailer(configured), SmtpMailer)


def test_build_mailer_rejects_unknown_backend() -> None:
    with pytest.raises(ConfigurationError):
        build_mailer(ContactSettings(mail_backend="carrier-pigeon"))
