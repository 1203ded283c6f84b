"""Shared fixtures for the ICT site test suite."""

from __future__ import annotations

import os

# The module-level app in ui.app must not start a ticker thread under test.
os.environ.setdefault("ICT_BACKTEST_AUTOSTART", "0")

import pytest

from config.settings import ContactSettings
from core.contact import DeliveryError, OutboundEmail


class FakeMailer:
    """Records outbound emails instead of sending them."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent: list[OutboundEmail] = []

    def send(self, email: OutboundEmail) -> str | None:
        if self.error is not None:
            raise self.error
        self.sent.append(email)
        return "fake-id"


@pytest.fixture
def contact_settings() -> ContactSettings:
    return ContactSettings(resend_api_key="re_test_key")


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def rejecting_mailer() -> FakeMailer:
    return FakeMailer(error=DeliveryError(details="provider rejected the message"))


@pytest.fixture
def crashing_mailer() -> FakeMailer:
    return FakeMailer(error=RuntimeError("connection reset by peer"))


@pytest.fixture
def make_app():
    """Build apps with injected delivery settings and mailer factory."""
    from ui.app import create_app

    created = []

    def _make(settings=None, mailer_factory=None):
        application = create_app(contact_settings=settings, mailer_factory=mailer_factory, autostart=False)
        application.config["TESTING"] = True
        created.append(application)
        return application

    yield _make
    for application in created:
        application.extensions["ict_scheduler"].stop()


@pytest.fixture
def app(make_app, contact_settings, mailer):
    return make_app(contact_settings, lambda _settings: mailer)


@pytest.fixture
def client(app):
    return app.test_client()
