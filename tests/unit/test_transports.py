"""Tests for Gmail and SMTP email transports."""

from __future__ import annotations

import base64
import email
from unittest.mock import MagicMock, patch

import httplib2
import pytest
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from pedibrief.core.config import EmailConfig
from pedibrief.exceptions import EmailConfigurationError, EmailDeliveryError
from pedibrief.notify.transports import (
    GMAIL_SEND_SCOPE,
    GmailTransport,
    IEmailTransport,
    SMTPTransport,
    build_mime_message,
    create_transport,
)


def _decode_raw(raw: str) -> email.message.Message:
    padded = raw + "=" * (-len(raw) % 4)
    return email.message_from_bytes(base64.urlsafe_b64decode(padded))


class TestBuildMimeMessage:
    def test_headers_and_html_part(self):
        msg = build_mime_message("from@example.com", "to@example.com", "Results", "<p>Hi</p>")
        assert msg["To"] == "to@example.com"
        assert msg["From"] == "from@example.com"
        assert msg["Subject"] == "Results"
        html_part = msg.get_body(preferencelist=("html",))
        assert "<p>Hi</p>" in html_part.get_content()


class TestGmailTransport:
    def test_requires_refresh_token(self, email_config: EmailConfig):
        config = email_config.model_copy(update={"gmail_refresh_token": ""})
        with pytest.raises(EmailConfigurationError, match="GMAIL_REFRESH_TOKEN"):
            GmailTransport(config).send("dr@example.com", "s", "<p>b</p>")

    def test_requires_sender(self, email_config: EmailConfig):
        config = email_config.model_copy(update={"sender": ""})
        with pytest.raises(EmailConfigurationError, match="GMAIL_USER_EMAIL"):
            GmailTransport(config).send("dr@example.com", "s", "<p>b</p>")

    def test_sends_base64url_message(self, email_config: EmailConfig):
        with patch("pedibrief.notify.transports.Credentials") as mock_creds, patch(
            "pedibrief.notify.transports.Request"
        ), patch("pedibrief.notify.transports.build") as mock_build:
            send = mock_build.return_value.users.return_value.messages.return_value.send
            send.return_value.execute.return_value = {"id": "msg-42"}

            message_id = GmailTransport(email_config).send("dr@example.com", "Quiz results", "<p>Score 80</p>")

        assert message_id == "msg-42"
        creds_kwargs = mock_creds.call_args.kwargs
        assert creds_kwargs["refresh_token"] == "refresh-token"
        assert creds_kwargs["client_id"] == "client-id"
        assert creds_kwargs["scopes"] == [GMAIL_SEND_SCOPE]
        mock_creds.return_value.refresh.assert_called_once()
        assert mock_build.call_args.args == ("gmail", "v1")

        send_kwargs = send.call_args.kwargs
        assert send_kwargs["userId"] == "me"
        raw = send_kwargs["body"]["raw"]
        assert "+" not in raw and "/" not in raw and "=" not in raw
        parsed = _decode_raw(raw)
        assert parsed["To"] == "dr@example.com"
        assert parsed["From"] == "pedibrief@example.com"
        assert parsed["Subject"] == "Quiz results"

    def test_refresh_failure(self, email_config: EmailConfig):
        with patch("pedibrief.notify.transports.Credentials") as mock_creds, patch(
            "pedibrief.notify.transports.Request"
        ), patch("pedibrief.notify.transports.build") as mock_build:
            mock_creds.return_value.refresh.side_effect = RefreshError("invalid_grant")
            with pytest.raises(EmailDeliveryError, match="token refresh failed"):
                GmailTransport(email_config).send("dr@example.com", "s", "<p>b</p>")
        mock_build.assert_not_called()

    def test_api_error(self, email_config: EmailConfig):
        resp = MagicMock(status=400, reason="Bad Request")
        with patch("pedibrief.notify.transports.Credentials"), patch(
            "pedibrief.notify.transports.Request"
        ), patch("pedibrief.notify.transports.build") as mock_build:
            send = mock_build.return_value.users.return_value.messages.return_value.send
            send.return_value.execute.side_effect = HttpError(resp, b"invalid recipient")
            with pytest.raises(EmailDeliveryError, match="Gmail API rejected"):
                GmailTransport(email_config).send("dr@example.com", "s", "<p>b</p>")

    def test_network_timeout_wrapped(self, email_config: EmailConfig):
        with patch("pedibrief.notify.transports.Credentials"), patch(
            "pedibrief.notify.transports.Request"
        ), patch("pedibrief.notify.transports.build") as mock_build:
            send = mock_build.return_value.users.return_value.messages.return_value.send
            send.return_value.execute.side_effect = TimeoutError("timed out")
            with pytest.raises(EmailDeliveryError, match="Cannot reach the Gmail API") as exc_info:
                GmailTransport(email_config).send("dr@example.com", "s", "<p>b</p>")
        assert isinstance(exc_info.value.__cause__, TimeoutError)

    def test_unknown_host_wrapped(self, email_config: EmailConfig):
        with patch("pedibrief.notify.transports.Credentials"), patch(
            "pedibrief.notify.transports.Request"
        ), patch(
            "pedibrief.notify.transports.build",
            side_effect=httplib2.ServerNotFoundError("Unable to find the server at gmail.googleapis.com"),
        ):
            with pytest.raises(EmailDeliveryError) as exc_info:
                GmailTransport(email_config).send("dr@example.com", "s", "<p>b</p>")
        assert isinstance(exc_info.value.__cause__, httplib2.ServerNotFoundError)

    def test_refresh_transport_error_wrapped(self, email_config: EmailConfig):
        with patch("pedibrief.notify.transports.Credentials") as mock_creds, patch(
            "pedibrief.notify.transports.Request"
        ), patch("pedibrief.notify.transports.build") as mock_build:
            mock_creds.return_value.refresh.side_effect = ConnectionResetError("reset by peer")
            with pytest.raises(EmailDeliveryError, match="token refresh failed"):
                GmailTransport(email_config).send("dr@example.com", "s", "<p>b</p>")
        mock_build.assert_not_called()


class TestSMTPTransport:
    def _config(self, **overrides) -> EmailConfig:
        fields = {
            "backend": "smtp",
            "sender": "clinic@example.com",
            "smtp_host": "smtp.example.com",
            "smtp_port": 2525,
            "smtp_username": "user",
            "smtp_password": "pass",
        }
        fields.update(overrides)
        return EmailConfig(**fields)

    def test_sends_with_starttls_and_login(self):
        with patch("pedibrief.notify.transports.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            message_id = SMTPTransport(self._config()).send("dr@example.com", "Results", "<p>ok</p>")

        assert mock_smtp.call_args.args == ("smtp.example.com", 2525)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("user", "pass")
        sent = server.send_message.call_args.args[0]
        assert sent["To"] == "dr@example.com"
        assert message_id == sent["Message-ID"]
        assert message_id.endswith("@example.com>")

    def test_skips_login_without_credentials(self):
        with patch("pedibrief.notify.transports.smtplib.SMTP") as mock_smtp:
            server = mock_smtp.return_value.__enter__.return_value
            SMTPTransport(self._config(smtp_username="", smtp_password="", smtp_starttls=False)).send(
                "dr@example.com", "Results", "<p>ok</p>"
            )
        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    def test_connection_error_wrapped(self):
        with patch("pedibrief.notify.transports.smtplib.SMTP", side_effect=ConnectionRefusedError("refused")):
            with pytest.raises(EmailDeliveryError) as exc_info:
                SMTPTransport(self._config()).send("dr@example.com", "Results", "<p>ok</p>")
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    def test_requires_sender(self):
        with pytest.raises(EmailConfigurationError):
            SMTPTransport(self._config(sender="", smtp_username="")).send("dr@example.com", "s", "b")


class TestCreateTransport:
    def test_gmail(self, email_config: EmailConfig):
        transport = create_transport(email_config)
        assert isinstance(transport, GmailTransport)
        assert isinstance(transport, IEmailTransport)

    def test_smtp(self):
        assert isinstance(create_transport(EmailConfig(backend="smtp")), SMTPTransport)

    def test_disabled(self):
        assert create_transport(EmailConfig(backend="disabled")) is None
