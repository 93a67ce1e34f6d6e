"""Pydantic data models for pedibrief.

JSON payloads keep the camelCase names used by the browser client
(``simpleExplanation``, ``correctOptionIndexes``); Python code uses
snake_case. Both spellings are accepted on input.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Summary contract ─────────────────────────────────────────────────


class Medication(_CamelModel):
    """A discharge medication in plain language."""

    model_config = ConfigDict(frozen=True)

    name: str
    dose: str = ""
    timing: str = ""
    notes: Optional[str] = None


class QuizQuestion(_CamelModel):
    """A comprehension question embedded in the summary.

    Multiple-choice questions carry ``options`` and a non-empty set of
    ``correct_option_indexes``. Free-text questions carry no options and a
    ``correct_answer`` reference string instead.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    options: list[str] = Field(default_factory=list)
    correct_option_indexes: list[int] = Field(default_factory=list)
    explanation: Optional[str] = None
    correct_answer: Optional[str] = None

    @field_validator("correct_option_indexes")
    @classmethod
    def _dedupe_indexes(cls, value: list[int]) -> list[int]:
        return sorted(set(value))

    @model_validator(mode="after")
    def _check_answer_key(self) -> QuizQuestion:
        if self.options:
            if not self.correct_option_indexes:
                raise ValueError(f"question {self.id!r} has options but no correct option index")
            bad = [i for i in self.correct_option_indexes if not 0 <= i < len(self.options)]
            if bad:
                raise ValueError(f"question {self.id!r} has correct indexes out of range: {bad}")
        else:
            if self.correct_option_indexes:
                raise ValueError(f"question {self.id!r} has correct indexes but no options")
            if not (self.correct_answer or "").strip():
                raise ValueError(f"free-text question {self.id!r} needs a correct_answer")
        return self

    @property
    def is_free_text(self) -> bool:
        return not self.options

    @property
    def correct_set(self) -> frozenset[int]:
        return frozenset(self.correct_option_indexes)


class PediatricSummary(_CamelModel):
    """Parent-friendly rendition of a discharge summary.

    Produced by the summarization backend and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    simple_explanation: str
    red_flags: list[str] = Field(default_factory=list)
    what_to_do: list[str] = Field(default_factory=list)
    what_not_to_do: list[str] = Field(default_factory=list)
    medications: list[Medication] = Field(default_factory=list)
    follow_up: list[str] = Field(default_factory=list)
    expected_course: str = ""
    quiz_questions: list[QuizQuestion] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_question_ids(self) -> PediatricSummary:
        seen: set[str] = set()
        for q in self.quiz_questions:
            if q.id in seen:
                raise ValueError(f"duplicate quiz question id {q.id!r}")
            seen.add(q.id)
        return self

    def question(self, question_id: str) -> QuizQuestion | None:
        """Look up a quiz question by id."""
        for q in self.quiz_questions:
            if q.id == question_id:
                return q
        return None


# ── Respondent answers ───────────────────────────────────────────────


class QuizAnswer(_CamelModel):
    """A respondent's answer to one question, held for the session only."""

    question_id: str
    selected_option_indexes: list[int] = Field(default_factory=list)
    score_fraction: float = Field(default=0.0, ge=0.0, le=1.0)
    answer_text: Optional[str] = None
    is_correct: Optional[bool] = None
    feedback: Optional[str] = None

    @field_validator("selected_option_indexes")
    @classmethod
    def _dedupe_indexes(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


class GradeResult(_CamelModel):
    """Outcome of grading a free-text answer."""

    is_correct: bool
    feedback: str
    source: Literal["llm", "fallback"] = "llm"


class ReconciliationRecord(_CamelModel):
    """Per-question comparison of the respondent's answer against the key."""

    question_id: str
    question: str
    options: list[str] = Field(default_factory=list)
    correct_options: list[int] = Field(default_factory=list)
    patient_selected: list[int] = Field(default_factory=list)
    is_correct: bool
    explanation: Optional[str] = None
    answer_text: Optional[str] = None


class QuizOutcome(_CamelModel):
    """Aggregate quiz score plus the reconciliation records behind it."""

    score: int = Field(ge=0, le=100)
    answered: int
    total_questions: int
    records: list[ReconciliationRecord] = Field(default_factory=list)


# ── Doctor notification ──────────────────────────────────────────────


class DoctorReport(_CamelModel):
    """Everything the email adapter needs: no patient identity beyond the token."""

    doctor_email: str
    quiz_score: int = Field(ge=0, le=100)
    quiz_data: list[ReconciliationRecord] = Field(default_factory=list)
    summary: PediatricSummary
    patient_id: str


class SendEmailRequest(_CamelModel):
    """Caller request to email quiz results to the treating physician."""

    doctor_email: str
    consent_given: bool = False
    summary: PediatricSummary
    quiz_answers: list[QuizAnswer] = Field(default_factory=list)
    quiz_score: Optional[int] = Field(default=None, ge=0, le=100)


class SendEmailResponse(_CamelModel):
    """Single-attempt send outcome; success means the transport accepted it."""

    success: bool
    message: str
    patient_id: Optional[str] = None
    message_id: Optional[str] = None
