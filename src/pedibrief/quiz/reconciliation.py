"""Quiz reconciliation: compare respondent selections against the answer key.

A multiple-choice answer is correct only when the selected set equals the
correct set exactly. ``score_fraction`` expresses partial credit but never
feeds the pass/fail field.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Literal

from pedibrief.exceptions import QuizValidationError
from pedibrief.models import (
    PediatricSummary,
    QuizAnswer,
    QuizOutcome,
    QuizQuestion,
    ReconciliationRecord,
)

log = logging.getLogger(__name__)

UnansweredPolicy = Literal["exclude", "zero"]


def is_exact_match(question: QuizQuestion, selected: Iterable[int]) -> bool:
    """True iff *selected* and the question's correct indexes are set-equal."""
    return frozenset(selected) == question.correct_set


def score_fraction(question: QuizQuestion, selected: Iterable[int]) -> float:
    """|selected ∩ correct| / max(|correct|, 1)."""
    correct = question.correct_set
    return len(frozenset(selected) & correct) / max(len(correct), 1)


def build_answer(question: QuizQuestion, selected: Iterable[int]) -> QuizAnswer:
    """Validate a multiple-choice selection and derive its score fraction."""
    if question.is_free_text:
        raise QuizValidationError(f"question {question.id!r} expects a free-text answer")
    chosen = sorted(set(selected))
    bad = [i for i in chosen if not 0 <= i < len(question.options)]
    if bad:
        raise QuizValidationError(
            f"question {question.id!r} has {len(question.options)} options; "
            f"selected indexes out of range: {bad}"
        )
    return QuizAnswer(
        question_id=question.id,
        selected_option_indexes=chosen,
        score_fraction=score_fraction(question, chosen),
    )


def _index_answers(answers: Iterable[QuizAnswer]) -> dict[str, QuizAnswer]:
    # Later answers to the same question replace earlier ones
    return {a.question_id: a for a in answers}


def _answer_is_correct(question: QuizQuestion, answer: QuizAnswer) -> bool:
    if question.is_free_text:
        return bool(answer.is_correct)
    return is_exact_match(question, answer.selected_option_indexes)


def reconcile(
    summary: PediatricSummary,
    answers: Iterable[QuizAnswer] | Mapping[str, QuizAnswer],
) -> list[ReconciliationRecord]:
    """Build one record per answered question, in the summary's question order.

    Questions without an answer are omitted; answers referencing unknown
    question ids are ignored.
    """
    by_id = dict(answers) if isinstance(answers, Mapping) else _index_answers(answers)

    records: list[ReconciliationRecord] = []
    for question in summary.quiz_questions:
        answer = by_id.get(question.id)
        if answer is None:
            continue
        records.append(
            ReconciliationRecord(
                question_id=question.id,
                question=question.question,
                options=list(question.options),
                correct_options=list(question.correct_option_indexes),
                patient_selected=list(answer.selected_option_indexes),
                is_correct=_answer_is_correct(question, answer),
                explanation=question.explanation,
                answer_text=answer.answer_text,
            )
        )

    unknown = set(by_id) - {q.id for q in summary.quiz_questions}
    if unknown:
        log.debug("Ignoring %d answer(s) for unknown question ids", len(unknown))
    return records


def aggregate_score(
    summary: PediatricSummary,
    answers: Iterable[QuizAnswer] | Mapping[str, QuizAnswer],
    *,
    unanswered: UnansweredPolicy = "exclude",
) -> int:
    """Mean per-question correctness scaled to an int in [0, 100].

    With ``unanswered="exclude"`` the denominator is the number of answered
    questions; with ``"zero"`` it is every question in the summary.
    """
    return score_quiz(summary, answers, unanswered=unanswered).score


def score_quiz(
    summary: PediatricSummary,
    answers: Iterable[QuizAnswer] | Mapping[str, QuizAnswer],
    *,
    unanswered: UnansweredPolicy = "exclude",
) -> QuizOutcome:
    """Reconcile *answers* and compute the aggregate score in one pass."""
    records = reconcile(summary, answers)
    total = len(summary.quiz_questions)
    denominator = len(records) if unanswered == "exclude" else total
    correct = sum(1 for r in records if r.is_correct)
    score = _round_half_up(correct * 100 / denominator) if denominator else 0
    return QuizOutcome(
        score=score,
        answered=len(records),
        total_questions=total,
        records=records,
    )


def _round_half_up(value: float) -> int:
    return int(value + 0.5)
