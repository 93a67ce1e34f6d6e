"""Quiz endpoints: free-text grading and aggregate scoring.

The API keeps no session state; callers post the summary with each request.
"""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pedibrief.api.dependencies import get_grader, get_settings
from pedibrief.core.config import AppSettings
from pedibrief.models import GradeResult, PediatricSummary, QuizAnswer, QuizOutcome
from pedibrief.quiz.grading import GradingService, build_grading_context
from pedibrief.quiz.reconciliation import score_quiz

router = APIRouter(tags=["quiz"])


class GradeRequest(BaseModel):
    """A free-text answer to check against its reference."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    question: str
    correct_answer: str = Field(min_length=1)
    user_answer: str = Field(min_length=1)
    summary: Optional[PediatricSummary] = None


class ScoreRequest(BaseModel):
    """Summary plus the respondent's answers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary: PediatricSummary
    answers: list[QuizAnswer] = Field(default_factory=list)
    unanswered: Optional[Literal["exclude", "zero"]] = None


@router.post("/quiz/grade", response_model=GradeResult)
async def grade_answer(
    request: GradeRequest,
    grader: GradingService = Depends(get_grader),
) -> GradeResult:
    """Grade a free-text answer; falls back to keyword overlap when the LLM is unavailable."""
    context = build_grading_context(request.summary) if request.summary else ""
    return await grader.grade(request.question, request.correct_answer, request.user_answer, context)


@router.post("/quiz/score", response_model=QuizOutcome)
async def score_answers(
    request: ScoreRequest,
    settings: AppSettings = Depends(get_settings),
) -> QuizOutcome:
    """Reconcile answers against the key and compute the 0-100 score."""
    return score_quiz(
        request.summary,
        request.answers,
        unanswered=request.unanswered or settings.quiz.unanswered_policy,
    )
