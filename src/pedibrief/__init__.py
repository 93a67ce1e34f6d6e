"""pedibrief: parent-friendly pediatric discharge summaries with comprehension quizzes.

Typical use::

    from pedibrief import (
        AppSettings, LLMClient,
        SummarizationService, GradingService, QuizSession,
        NotificationService, create_transport,
    )

    settings = AppSettings()
    client = LLMClient(settings.llm)
    summary = await SummarizationService(client).summarize_text(discharge_text)

    session = QuizSession(summary)
    session.submit_choice("q1", [1])
    print(session.score())
"""

from __future__ import annotations

from typing import Any

from pedibrief.core.config import AppSettings
from pedibrief.core.identifiers import generate_deidentified_id
from pedibrief.models import (
    DoctorReport,
    GradeResult,
    Medication,
    PediatricSummary,
    QuizAnswer,
    QuizOutcome,
    QuizQuestion,
    ReconciliationRecord,
    SendEmailRequest,
    SendEmailResponse,
)
from pedibrief.notify import NotificationService, create_transport
from pedibrief.providers.client import LLMClient
from pedibrief.quiz import GradingService, aggregate_score, keyword_grade, reconcile, score_quiz
from pedibrief.services import SummarizationService
from pedibrief.session import QuizSession

__all__ = [
    "AppSettings",
    "DoctorReport",
    "GradeResult",
    "GradingService",
    "LLMClient",
    "Medication",
    "NotificationService",
    "PDFFormatter",
    "PediatricSummary",
    "QuizAnswer",
    "QuizOutcome",
    "QuizQuestion",
    "QuizSession",
    "ReconciliationRecord",
    "SendEmailRequest",
    "SendEmailResponse",
    "SummarizationService",
    "aggregate_score",
    "create_transport",
    "generate_deidentified_id",
    "keyword_grade",
    "reconcile",
    "score_quiz",
]


def __getattr__(name: str) -> Any:
    # reportlab is only imported when the PDF formatter is actually used
    if name == "PDFFormatter":
        from pedibrief.formatters.pdf_formatter import PDFFormatter

        return PDFFormatter
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
