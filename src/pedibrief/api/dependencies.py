"""Request-scoped accessors for services built during application startup."""

from __future__ import annotations

from fastapi import Request

from pedibrief.core.config import AppSettings
from pedibrief.notify.service import NotificationService
from pedibrief.quiz.grading import GradingService
from pedibrief.services.summarizer import SummarizationService


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_summarizer(request: Request) -> SummarizationService:
    return request.app.state.summarizer


def get_grader(request: Request) -> GradingService:
    return request.app.state.grader


def get_notifier(request: Request) -> NotificationService:
    return request.app.state.notifier
