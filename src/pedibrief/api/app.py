"""FastAPI application with lifespan management."""

from __future__ import annotations

import importlib.metadata
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from pedibrief.api.middleware.error_handler import register_error_handlers
from pedibrief.api.routes import doctor_email, export, health, quiz, summarize
from pedibrief.core.config import APIConfig, AppSettings
from pedibrief.core.logging_config import setup_logging
from pedibrief.core.startup_checks import validate_settings
from pedibrief.formatters.email_formatter import EmailFormatter
from pedibrief.notify.service import NotificationService
from pedibrief.notify.transports import IEmailTransport, create_transport
from pedibrief.providers.client import LLMClient
from pedibrief.quiz.grading import GradingService
from pedibrief.services.summarizer import SummarizationService


def _get_version() -> str:
    """Read package version from installed metadata, with dev fallback."""
    try:
        return importlib.metadata.version("pedibrief")
    except importlib.metadata.PackageNotFoundError:
        return "0.0.0-dev"


def attach_services(
    app: FastAPI,
    settings: AppSettings,
    *,
    llm_client: LLMClient | None = None,
    transport: IEmailTransport | None = None,
) -> None:
    """Build the per-process services and hang them on ``app.state``."""
    client = llm_client or LLMClient(settings.llm)
    if transport is None:
        transport = create_transport(settings.email)

    app.state.settings = settings
    app.state.summarizer = SummarizationService(client, intake=settings.intake, quiz=settings.quiz)
    app.state.grader = GradingService(client, settings.grading, model=settings.llm.grading_model or None)
    app.state.notifier = NotificationService(
        transport,
        EmailFormatter(settings.email),
        settings.email,
        settings.quiz,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application startup/shutdown lifecycle."""
    settings = AppSettings()
    validate_settings(settings)
    setup_logging(settings.observability)
    attach_services(app, settings)
    yield


def create_app(api_config: APIConfig | None = None) -> FastAPI:
    """Assemble the app: routers, error handlers and the startup lifespan."""
    api_config = api_config or APIConfig()
    application = FastAPI(
        title=api_config.title,
        description=api_config.description,
        version=_get_version(),
        lifespan=lifespan,
    )
    register_error_handlers(application)
    application.include_router(health.router)
    application.include_router(summarize.router, prefix="/api")
    application.include_router(quiz.router, prefix="/api")
    application.include_router(export.router, prefix="/api")
    application.include_router(doctor_email.router, prefix="/api")
    return application


app = create_app()
