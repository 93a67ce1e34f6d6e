"""Startup validation: fail-fast on critical misconfigurations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pedibrief.core.config import AppSettings

log = logging.getLogger(__name__)

# Providers that use local auth and do not require an API key
_NO_KEY_PROVIDERS = frozenset({"ollama"})


def validate_settings(settings: AppSettings) -> None:
    """Validate application settings at startup. Raises ValueError on fatal misconfig."""
    _check_api_key(settings)
    _check_email(settings)


def _check_api_key(settings: AppSettings) -> None:
    """Reject placeholder API keys for providers that need real ones."""
    if settings.llm.provider not in _NO_KEY_PROVIDERS:
        if settings.llm.api_key in ("no-key", ""):
            raise ValueError(
                f"PEDIBRIEF_LLM_API_KEY is required for provider '{settings.llm.provider}'. "
                f"Set it via environment variable or secrets manager."
            )


def _check_email(settings: AppSettings) -> None:
    """Reject a selected email backend that cannot possibly send."""
    email = settings.email
    if email.backend == "disabled":
        log.warning("PEDIBRIEF_EMAIL_BACKEND=disabled; doctor notifications will be rejected.")
        return

    missing: list[str] = []
    if not email.sender:
        missing.append("GMAIL_USER_EMAIL")
    if email.backend == "gmail":
        if not email.gmail_client_id:
            missing.append("GMAIL_CLIENT_ID")
        if not email.gmail_client_secret:
            missing.append("GMAIL_CLIENT_SECRET")
        if not email.gmail_refresh_token:
            missing.append("GMAIL_REFRESH_TOKEN")
    elif email.backend == "smtp" and email.smtp_username and not email.smtp_password:
        missing.append("PEDIBRIEF_EMAIL_SMTP_PASSWORD")

    if missing:
        raise ValueError(
            f"PEDIBRIEF_EMAIL_BACKEND={email.backend} but {', '.join(missing)} not set. "
            "Run `pedibrief gmail-token` to mint a refresh token, or set "
            "PEDIBRIEF_EMAIL_BACKEND=disabled."
        )
