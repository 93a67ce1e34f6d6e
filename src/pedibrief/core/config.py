"""Nested pydantic-settings configuration for the application.

Each sub-model reads its own ``PEDIBRIEF_<GROUP>_*`` env vars, so both
``AppSettings().llm.model`` and ``export PEDIBRIEF_LLM_MODEL=...`` work.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class LLMConfig(BaseSettings):
    """LLM backend used for summarization and free-text grading.

    Env vars use ``PEDIBRIEF_LLM_`` prefix::

        export PEDIBRIEF_LLM_PROVIDER=gemini
        export PEDIBRIEF_LLM_MODEL=gemini/gemini-2.0-flash
    """

    model_config = {"env_prefix": "PEDIBRIEF_LLM_"}

    provider: Literal["gemini", "openai", "anthropic", "ollama", "litellm"] = "gemini"
    base_url: str = ""
    api_key: str = "no-key"
    model: str = "gemini/gemini-2.0-flash"
    grading_model: str = ""
    temperature: float = 0.2
    top_p: float = 1.0
    timeout: float = 60.0
    max_retries: int = Field(default=1, ge=1)
    retry_max_delay: float = 30.0


class IntakeConfig(BaseSettings):
    """Discharge summary input limits.

    Env vars use ``PEDIBRIEF_INTAKE_`` prefix.
    """

    model_config = {"env_prefix": "PEDIBRIEF_INTAKE_"}

    min_text_chars: int = Field(default=50, ge=1)
    max_file_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    allowed_extensions: list[str] = [".pdf", ".png", ".jpg", ".jpeg", ".webp"]
    allowed_content_types: list[str] = [
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/jpg",
        "image/webp",
    ]


class QuizConfig(BaseSettings):
    """Quiz scoring policy.

    Env vars use ``PEDIBRIEF_QUIZ_`` prefix.
    """

    model_config = {"env_prefix": "PEDIBRIEF_QUIZ_"}

    unanswered_policy: Literal["exclude", "zero"] = "exclude"
    question_count: int = Field(default=3, ge=1, le=10)
    passing_score: int = Field(default=70, ge=0, le=100)


class GradingConfig(BaseSettings):
    """Keyword-overlap fallback grader policy.

    Env vars use ``PEDIBRIEF_GRADING_`` prefix::

        export PEDIBRIEF_GRADING_MAX_REQUIRED_MATCHES=2
    """

    model_config = {"env_prefix": "PEDIBRIEF_GRADING_"}

    min_token_length: int = Field(default=3, ge=0)
    match_divisor: int = Field(default=3, ge=1)
    max_required_matches: int = Field(default=3, ge=1)
    min_required_matches: int = Field(default=1, ge=0)
    correct_feedback: str = "Great! You've correctly identified the key points."
    generic_feedback: str = (
        "We couldn't check this answer automatically. "
        "Please review the summary with your care team."
    )


class EmailConfig(BaseSettings):
    """Doctor notification transport.

    Env vars use ``PEDIBRIEF_EMAIL_`` prefix. The Gmail backend also honours
    the ``GMAIL_*`` names written by ``pedibrief gmail-token``.
    """

    model_config = {"env_prefix": "PEDIBRIEF_EMAIL_", "populate_by_name": True}

    backend: Literal["gmail", "smtp", "disabled"] = "gmail"
    sender: str = Field(
        default="",
        validation_alias=AliasChoices("PEDIBRIEF_EMAIL_SENDER", "GMAIL_USER_EMAIL"),
    )
    id_prefix: str = "PEDI"
    subject_template: str = "PediBrief quiz results {patient_id} (score {score}/100)"

    gmail_client_id: str = Field(
        default="",
        validation_alias=AliasChoices("PEDIBRIEF_EMAIL_GMAIL_CLIENT_ID", "GMAIL_CLIENT_ID"),
    )
    gmail_client_secret: str = Field(
        default="",
        validation_alias=AliasChoices("PEDIBRIEF_EMAIL_GMAIL_CLIENT_SECRET", "GMAIL_CLIENT_SECRET"),
    )
    gmail_refresh_token: str = Field(
        default="",
        validation_alias=AliasChoices("PEDIBRIEF_EMAIL_GMAIL_REFRESH_TOKEN", "GMAIL_REFRESH_TOKEN"),
    )
    gmail_redirect_uri: str = "http://localhost:3000/oauth2callback"
    gmail_token_uri: str = "https://oauth2.googleapis.com/token"

    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_starttls: bool = True
    smtp_timeout: float = 30.0


class PDFFormattingConfig(BaseSettings):
    """PDF export formatting.

    Env vars use ``PEDIBRIEF_PDF_`` prefix::

        export PEDIBRIEF_PDF_PAGE_SIZE=a4
    """

    model_config = {"env_prefix": "PEDIBRIEF_PDF_"}

    page_size: Literal["letter", "a4"] = "a4"
    margin_inches: float = Field(default=0.8, gt=0.0, le=3.0)
    font_family: str = "Helvetica"
    body_font_size: int = Field(default=11, ge=6, le=72)
    heading_font_size: int = Field(default=14, ge=6, le=72)
    brand_name: str = "PediBrief"
    subtitle: str = "Your Child's Care Summary"
    filename: str = "pedibrief-summary.pdf"


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Env vars use ``PEDIBRIEF_OBSERVABILITY_`` prefix.
    """

    model_config = {"env_prefix": "PEDIBRIEF_OBSERVABILITY_"}

    service_name: str = "pedibrief"
    log_level: str = "INFO"
    json_logs: bool | None = None


class APIConfig(BaseSettings):
    """HTTP API metadata and bind address.

    Env vars use ``PEDIBRIEF_API_`` prefix.
    """

    model_config = {"env_prefix": "PEDIBRIEF_API_"}

    title: str = "PediBrief"
    description: str = "Parent-friendly discharge summaries, comprehension quizzes and doctor notifications."
    host: str = "0.0.0.0"
    port: int = 8080


class AppSettings(BaseSettings):
    """Top-level application settings aggregating all sub-configs."""

    llm: LLMConfig = LLMConfig()
    intake: IntakeConfig = IntakeConfig()
    quiz: QuizConfig = QuizConfig()
    grading: GradingConfig = GradingConfig()
    email: EmailConfig = EmailConfig()
    pdf: PDFFormattingConfig = PDFFormattingConfig()
    observability: ObservabilityConfig = ObservabilityConfig()
    api: APIConfig = APIConfig()
