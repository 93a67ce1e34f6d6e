"""Shared fixtures for pedibrief tests."""

from __future__ import annotations

import pytest

from pedibrief.core.config import AppSettings, EmailConfig, LLMConfig
from pedibrief.models import Medication, PediatricSummary, QuizQuestion


@pytest.fixture
def sample_summary() -> PediatricSummary:
    """Gastroenteritis discharge: one single-answer, one multi-select and one free-text question."""
    return PediatricSummary(
        simple_explanation="Your child had a stomach bug that made them lose a lot of fluid.",
        red_flags=["No wet diaper in 8 hours", "Fever over 104F", "Very sleepy and hard to wake"],
        what_to_do=["Offer small sips of fluid every 15 minutes", "Let your child rest"],
        what_not_to_do=["Do not give sports drinks", "Avoid fruit juice for 2 days"],
        medications=[
            Medication(
                name="Ondansetron",
                dose="2 mg",
                timing="Every 8 hours as needed for vomiting",
                notes="Dissolve on the tongue",
            )
        ],
        follow_up=["See your pediatrician in 2 days"],
        expected_course="Vomiting should stop within 1-2 days. Loose stools can last a week.",
        quiz_questions=[
            QuizQuestion(
                id="q1",
                question="When should you bring your child back to the ER?",
                options=["When they are hungry", "No wet diaper in 8 hours", "After a nap", "When bored"],
                correct_option_indexes=[1],
                explanation="Going 8 hours without a wet diaper is a sign of dehydration.",
            ),
            QuizQuestion(
                id="q2",
                question="Which of these help your child recover?",
                options=["Small sips of fluid", "Sports drinks", "Rest", "Fruit juice"],
                correct_option_indexes=[0, 2],
                explanation="Fluids in small amounts and rest help; sugary drinks can worsen diarrhea.",
            ),
            QuizQuestion(
                id="q3",
                question="What signs mean your child needs care right away?",
                correct_answer="fever; dehydration; lethargy",
            ),
        ],
    )


@pytest.fixture
def single_question_summary() -> PediatricSummary:
    """Minimal summary with one four-option question whose answer is option 1."""
    return PediatricSummary(
        simple_explanation="Your child had croup, a swelling of the upper airway.",
        red_flags=["Noisy breathing at rest"],
        quiz_questions=[
            QuizQuestion(
                id="q1",
                question="Which sign means you should return to the ER?",
                options=["Mild cough", "Noisy breathing at rest", "Runny nose", "Sneezing"],
                correct_option_indexes=[1],
            )
        ],
    )


@pytest.fixture
def email_config() -> EmailConfig:
    return EmailConfig(
        backend="gmail",
        sender="pedibrief@example.com",
        gmail_client_id="client-id",
        gmail_client_secret="client-secret",
        gmail_refresh_token="refresh-token",
    )


@pytest.fixture
def settings(email_config: EmailConfig) -> AppSettings:
    """Settings that pass startup validation without touching the environment."""
    return AppSettings(
        llm=LLMConfig(provider="gemini", api_key="test-key", model="gemini/test-model"),
        email=email_config,
    )
