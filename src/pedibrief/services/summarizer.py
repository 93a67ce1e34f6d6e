"""Summarization service: discharge summary in, ``PediatricSummary`` out."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pedibrief.core.config import IntakeConfig, QuizConfig
from pedibrief.exceptions import JSONParseError, LLMClientError, SummarizationError
from pedibrief.models import PediatricSummary
from pedibrief.prompts import (
    SUMMARIZATION_DOCUMENT_PROMPT,
    SUMMARIZATION_SYSTEM_PROMPT,
    SUMMARIZATION_TEXT_PROMPT,
)
from pedibrief.providers.client import Attachment, LLMClient
from pedibrief.services.intake import validate_document, validate_text

log = logging.getLogger(__name__)

_LIST_FIELDS = ("redFlags", "whatToDo", "whatNotToDo", "followUp", "medications", "quizQuestions")


def normalize_summary_payload(payload: Any) -> Any:
    """Patch the small gaps models leave in otherwise usable output.

    Null list fields become empty lists, string list fields are wrapped, and
    quiz questions without an id get ``q1``, ``q2``, ... by position. Anything
    else of the wrong shape is passed through for model validation to reject.
    """
    if not isinstance(payload, dict):
        return payload
    data = dict(payload)
    for key in _LIST_FIELDS:
        value = data.get(key)
        if value is None:
            data[key] = []
        elif isinstance(value, str):
            data[key] = [value] if value.strip() else []

    raw_questions = data["quizQuestions"]
    if not isinstance(raw_questions, list):
        return data

    questions: list[Any] = []
    for position, raw in enumerate(raw_questions, start=1):
        if isinstance(raw, dict):
            q = dict(raw)
            if not str(q.get("id") or "").strip():
                q["id"] = f"q{position}"
            else:
                q["id"] = str(q["id"])
            questions.append(q)
        else:
            questions.append(raw)
    data["quizQuestions"] = questions
    return data


class SummarizationService:
    """Calls the LLM once per summary and validates the result."""

    def __init__(
        self,
        client: LLMClient,
        *,
        intake: IntakeConfig | None = None,
        quiz: QuizConfig | None = None,
    ) -> None:
        self._client = client
        self._intake = intake or IntakeConfig()
        self._quiz = quiz or QuizConfig()

    async def summarize_text(self, text: str) -> PediatricSummary:
        """Simplify pasted discharge summary text."""
        cleaned = validate_text(text, self._intake)
        prompt = SUMMARIZATION_TEXT_PROMPT.format(
            discharge_text=cleaned,
            question_count=self._quiz.question_count,
        )
        log.info("Summarizing discharge text", extra={"chars": len(cleaned)})
        return await self._run(prompt, attachments=None)

    async def summarize_document(
        self,
        data: bytes,
        filename: str,
        content_type: str | None = None,
    ) -> PediatricSummary:
        """Simplify an uploaded PDF or image of a discharge summary."""
        upload = validate_document(data, filename, content_type, self._intake)
        prompt = SUMMARIZATION_DOCUMENT_PROMPT.format(
            filename=upload.filename,
            question_count=self._quiz.question_count,
        )
        log.info(
            "Summarizing discharge document",
            extra={"content_type": upload.content_type, "size_kb": round(upload.size_kb, 1)},
        )
        attachment = Attachment(data=upload.data, mime_type=upload.content_type)
        return await self._run(prompt, attachments=[attachment])

    async def _run(self, prompt: str, attachments: list[Attachment] | None) -> PediatricSummary:
        try:
            payload = await self._client.complete_json(
                prompt,
                system_prompt=SUMMARIZATION_SYSTEM_PROMPT,
                attachments=attachments,
            )
        except JSONParseError as e:
            raise SummarizationError("The summarizer returned an unreadable response. Please try again.") from e
        except LLMClientError as e:
            raise SummarizationError(f"The summarization service is unavailable: {e}") from e

        try:
            summary = PediatricSummary.model_validate(normalize_summary_payload(payload))
        except ValidationError as e:
            log.warning("Summarizer output failed validation", extra={"errors": e.error_count()})
            raise SummarizationError(
                "The summarizer returned an incomplete summary. Please try again."
            ) from e

        log.info(
            "Summary ready",
            extra={
                "quiz_questions": len(summary.quiz_questions),
                "medications": len(summary.medications),
            },
        )
        return summary
