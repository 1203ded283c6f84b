"""Contact form relay: validate, format, send, acknowledge."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping

from config.settings import ContactSettings

if TYPE_CHECKING:
    from core.mailer import Mailer

LOGGER = logging.getLogger("ict.contact")

PLACEHOLDER = "-"
ALLOWED_METHOD = "POST"


class ContactError(Exception):
    """Base for failures that map to a JSON error response."""

    status_code = 500
    default_message = "Contact request failed"

    def __init__(self, message: str | None = None, details: str | None = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ContactError):
    status_code = 400
    default_message = "Missing fields"


class ConfigurationError(ContactError):
    status_code = 500
    default_message = "Email delivery is not configured"


class DeliveryError(ContactError):
    status_code = 500
    default_message = "Email failed"


class MethodNotAllowedError(ContactError):
    status_code = 405
    default_message = "Method not allowed"


@dataclass(frozen=True)
class ContactSubmission:
    """One inbound contact form submission."""

    email: str
    message: str
    name: str | None = None
    level: str | None = None

    @classmethod
    def from_payload(cls, payload: Any) -> ContactSubmission:
        """Validate a decoded JSON body; blank or non-string values count as missing.

        The message is kept verbatim so its whitespace reaches the email body.
        """
        data: Mapping[str, Any] = payload if isinstance(payload, Mapping) else {}
        email = _clean(data.get("email"))
        message = data.get("message")
        if not email or not _clean(message):
            raise ValidationError()
        return cls(
            email=email,
            message=message,
            name=_clean(data.get("name")),
            level=_clean(data.get("level")),
        )


@dataclass(frozen=True)
class OutboundEmail:
    sender: str
    to: tuple[str, ...]
    reply_to: str
    subject: str
    text: str


def _clean(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def format_body(submission: ContactSubmission) -> str:
    return (
        f"Name: {submission.name or PLACEHOLDER}\n"
        f"Email: {submission.email}\n"
        f"Experience: {submission.level or PLACEHOLDER}\n\n"
        f"Message:\n{submission.message}"
    )


def build_email(submission: ContactSubmission, settings: ContactSettings) -> OutboundEmail:
    return OutboundEmail(
        sender=settings.sender,
        to=tuple(settings.recipients),
        reply_to=submission.email,
        subject=settings.subject,
        text=format_body(submission),
    )


def relay_contact(
    method: str,
    payload: Any,
    settings: ContactSettings,
    mailer_factory: Callable[[ContactSettings], Mailer],
) -> dict[str, bool]:
    """Run one submission through the relay.

    Raises a ``ContactError`` subclass on any failure. The mailer is only
    built once the payload is valid, and a missing credential surfaces as
    ``ConfigurationError`` before any send is attempted. No retries.
    """
    if (method or "").upper() != ALLOWED_METHOD:
        raise MethodNotAllowedError()

    submission = ContactSubmission.from_payload(payload)
    mailer = mailer_factory(settings)
    email = build_email(submission, settings)

    try:
        message_id = mailer.send(email)
    except DeliveryError as exc:
        LOGGER.warning("Contact email delivery failed: %s", exc.details or exc.message)
        raise
    except Exception as exc:
        LOGGER.warning("Contact email delivery failed: %s", exc)
        raise DeliveryError(details=str(exc)[:200]) from exc

    LOGGER.info("Contact email sent (reply_to=%s, id=%s)", submission.email, message_id)
    return {"success": True}
