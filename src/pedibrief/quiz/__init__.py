"""Quiz scoring: exact-match reconciliation and free-text grading."""

from __future__ import annotations

from pedibrief.quiz.fallback import keyword_grade
from pedibrief.quiz.grading import GradingService, build_grading_context
from pedibrief.quiz.reconciliation import (
    aggregate_score,
    build_answer,
    is_exact_match,
    reconcile,
    score_fraction,
    score_quiz,
)

__all__ = [
    "GradingService",
    "aggregate_score",
    "build_answer",
    "build_grading_context",
    "is_exact_match",
    "keyword_grade",
    "reconcile",
    "score_fraction",
    "score_quiz",
]
