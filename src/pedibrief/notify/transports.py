"""Email transports for doctor notifications.

Transports are blocking and single-attempt: one call to :meth:`send` is one
delivery attempt, and any failure surfaces as ``EmailDeliveryError``.
"""

from __future__ import annotations

import base64
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Protocol, runtime_checkable

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from pedibrief.core.config import EmailConfig
from pedibrief.exceptions import EmailConfigurationError, EmailDeliveryError

log = logging.getLogger(__name__)

GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"


@runtime_checkable
class IEmailTransport(Protocol):
    """Protocol for anything that can deliver one HTML email."""

    def send(self, to: str, subject: str, html_body: str) -> str:
        """Deliver the message and return the provider's message id."""
        ...


def build_mime_message(sender: str, to: str, subject: str, html_body: str) -> EmailMessage:
    """RFC 2822 message with an HTML body."""
    msg = EmailMessage()
    msg["To"] = to
    msg["From"] = sender
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML-capable mail client.")
    msg.add_alternative(html_body, subtype="html")
    return msg


class GmailTransport:
    """Sends through the Gmail API with an OAuth2 refresh token."""

    def __init__(self, config: EmailConfig) -> None:
        self._config = config

    def _credentials(self) -> Credentials:
        cfg = self._config
        if not cfg.gmail_refresh_token:
            raise EmailConfigurationError("GMAIL_REFRESH_TOKEN is not set. Run `pedibrief gmail-token` first.")
        if not cfg.gmail_client_id or not cfg.gmail_client_secret:
            raise EmailConfigurationError("GMAIL_CLIENT_ID and GMAIL_CLIENT_SECRET must both be set.")

        credentials = Credentials(
            token=None,
            refresh_token=cfg.gmail_refresh_token,
            client_id=cfg.gmail_client_id,
            client_secret=cfg.gmail_client_secret,
            token_uri=cfg.gmail_token_uri,
            scopes=[GMAIL_SEND_SCOPE],
        )
        try:
            credentials.refresh(Request())
        except (GoogleAuthError, OSError) as e:
            raise EmailDeliveryError(f"Gmail token refresh failed: {e}") from e
        return credentials

    def send(self, to: str, subject: str, html_body: str) -> str:
        sender = self._config.sender
        if not sender:
            raise EmailConfigurationError("GMAIL_USER_EMAIL is not set")

        credentials = self._credentials()
        raw = base64.urlsafe_b64encode(build_mime_message(sender, to, subject, html_body).as_bytes())
        try:
            service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
            response = (
                service.users()
                .messages()
                .send(userId="me", body={"raw": raw.decode("ascii").rstrip("=")})
                .execute()
            )
        except HttpError as e:
            raise EmailDeliveryError(f"Gmail API rejected the message: {e}") from e
        except (OSError, httplib2.HttpLib2Error) as e:
            raise EmailDeliveryError(f"Cannot reach the Gmail API: {e}") from e

        message_id = response.get("id") or "unknown"
        log.info("Email sent via Gmail", extra={"message_id": message_id})
        return message_id


class SMTPTransport:
    """Sends through an SMTP relay, upgrading to TLS when configured."""

    def __init__(self, config: EmailConfig) -> None:
        self._config = config

    def send(self, to: str, subject: str, html_body: str) -> str:
        cfg = self._config
        sender = cfg.sender or cfg.smtp_username
        if not sender:
            raise EmailConfigurationError("PEDIBRIEF_EMAIL_SENDER is not set")

        msg = build_mime_message(sender, to, subject, html_body)
        msg["Message-ID"] = make_msgid(domain=sender.partition("@")[2] or None)
        try:
            with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.smtp_timeout) as server:
                if cfg.smtp_starttls:
                    server.starttls(context=ssl.create_default_context())
                if cfg.smtp_username and cfg.smtp_password:
                    server.login(cfg.smtp_username, cfg.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"SMTP delivery failed: {e}") from e

        message_id = msg["Message-ID"]
        log.info("Email sent via SMTP", extra={"host": cfg.smtp_host})
        return message_id


def create_transport(config: EmailConfig) -> IEmailTransport | None:
    """Transport for the configured backend, or ``None`` when email is disabled."""
    if config.backend == "gmail":
        return GmailTransport(config)
    if config.backend == "smtp":
        return SMTPTransport(config)
    return None
