"""Caller-owned quiz session state.

A ``QuizSession`` holds one immutable summary and the answers collected
against it. It is created per caregiver session, never shared, and simply
dropped when the session ends; nothing is written anywhere.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pedibrief.exceptions import QuizValidationError
from pedibrief.models import (
    PediatricSummary,
    QuizAnswer,
    QuizOutcome,
    QuizQuestion,
    ReconciliationRecord,
)
from pedibrief.quiz.reconciliation import UnansweredPolicy, build_answer, reconcile, score_quiz

if TYPE_CHECKING:
    from pedibrief.quiz.grading import GradingService

log = logging.getLogger(__name__)


class QuizSession:
    """Answers accumulated against a single summary."""

    def __init__(self, summary: PediatricSummary, *, unanswered: UnansweredPolicy = "exclude") -> None:
        self._summary = summary
        self._unanswered = unanswered
        self._answers: dict[str, QuizAnswer] = {}

    @property
    def summary(self) -> PediatricSummary:
        return self._summary

    @property
    def answers(self) -> list[QuizAnswer]:
        """Answers in question order, regardless of submission order."""
        return [self._answers[q.id] for q in self._summary.quiz_questions if q.id in self._answers]

    @property
    def is_complete(self) -> bool:
        return all(q.id in self._answers for q in self._summary.quiz_questions)

    def unanswered_question_ids(self) -> list[str]:
        return [q.id for q in self._summary.quiz_questions if q.id not in self._answers]

    def _question(self, question_id: str) -> QuizQuestion:
        question = self._summary.question(question_id)
        if question is None:
            raise QuizValidationError(f"unknown question id {question_id!r}")
        return question

    def submit_choice(self, question_id: str, selected: list[int] | set[int]) -> QuizAnswer:
        """Record a multiple-choice selection, replacing any earlier answer."""
        answer = build_answer(self._question(question_id), selected)
        self._answers[question_id] = answer
        return answer

    async def submit_text(self, question_id: str, text: str, grader: GradingService) -> QuizAnswer:
        """Grade and record a free-text answer, replacing any earlier answer."""
        question = self._question(question_id)
        if not question.is_free_text:
            raise QuizValidationError(f"question {question_id!r} expects option indexes")
        if not text.strip():
            raise QuizValidationError("answer text is empty")

        grade = await grader.grade_for_summary(
            self._summary,
            question.question,
            question.correct_answer or "",
            text,
        )
        answer = QuizAnswer(
            question_id=question_id,
            answer_text=text,
            is_correct=grade.is_correct,
            feedback=grade.feedback,
            score_fraction=1.0 if grade.is_correct else 0.0,
        )
        self._answers[question_id] = answer
        log.debug("Graded free-text answer", extra={"question_id": question_id, "source": grade.source})
        return answer

    def records(self) -> list[ReconciliationRecord]:
        return reconcile(self._summary, self._answers)

    def outcome(self, *, unanswered: UnansweredPolicy | None = None) -> QuizOutcome:
        return score_quiz(self._summary, self._answers, unanswered=unanswered or self._unanswered)

    def score(self, *, unanswered: UnansweredPolicy | None = None) -> int:
        return self.outcome(unanswered=unanswered).score

    def reset(self) -> None:
        """Forget every answer; the summary stays."""
        self._answers.clear()
