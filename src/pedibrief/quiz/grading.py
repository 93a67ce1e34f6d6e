"""Free-text answer grading: LLM first, keyword overlap when that fails."""

from __future__ import annotations

import logging
from typing import Any

from pedibrief.core.config import GradingConfig
from pedibrief.exceptions import GradingError, JSONParseError, LLMClientError
from pedibrief.models import GradeResult, PediatricSummary
from pedibrief.prompts import GRADING_PROMPT, GRADING_SYSTEM_PROMPT
from pedibrief.providers.client import LLMClient
from pedibrief.quiz.fallback import keyword_grade

log = logging.getLogger(__name__)


def build_grading_context(summary: PediatricSummary) -> str:
    """Summary excerpt handed to the grader alongside each answer."""
    medications = "; ".join(f"{m.name} - {m.dose}, {m.timing}" for m in summary.medications)
    return "\n".join(
        [
            f"Summary: {summary.simple_explanation}",
            f"What To Do: {'; '.join(summary.what_to_do)}",
            f"Red Flags: {'; '.join(summary.red_flags)}",
            f"Medications: {medications}",
        ]
    )


def _parse_grade(payload: dict[str, Any]) -> GradeResult:
    raw_correct = payload.get("isCorrect", payload.get("is_correct"))
    feedback = payload.get("feedback")
    if not isinstance(raw_correct, bool) or not isinstance(feedback, str) or not feedback.strip():
        raise GradingError(f"Grading response missing isCorrect/feedback: keys={sorted(payload)}")
    return GradeResult(is_correct=raw_correct, feedback=feedback.strip(), source="llm")


class GradingService:
    """Grades free-text answers; degrades to :func:`keyword_grade` on any backend failure."""

    def __init__(
        self,
        client: LLMClient | None,
        policy: GradingConfig | None = None,
        *,
        model: str | None = None,
    ) -> None:
        self._client = client
        self._policy = policy or GradingConfig()
        self._model = model or None

    async def grade(
        self,
        question: str,
        reference: str,
        answer: str,
        context: str = "",
    ) -> GradeResult:
        """Grade *answer* against *reference*. Never raises for backend failures."""
        if self._client is None:
            return keyword_grade(reference, answer, self._policy)

        prompt = GRADING_PROMPT.format(
            question=question,
            reference=reference,
            answer=answer,
            context=context or "(none)",
        )
        try:
            payload = await self._client.complete_json(
                prompt,
                system_prompt=GRADING_SYSTEM_PROMPT,
                model=self._model,
            )
            return _parse_grade(payload)
        except (LLMClientError, JSONParseError, GradingError) as e:
            log.warning("LLM grading unavailable, using keyword fallback: %s", type(e).__name__)
            return keyword_grade(reference, answer, self._policy)

    async def grade_for_summary(
        self,
        summary: PediatricSummary,
        question: str,
        reference: str,
        answer: str,
    ) -> GradeResult:
        return await self.grade(question, reference, answer, build_grading_context(summary))
