"""Keyword-overlap grader used when the LLM grading call is unavailable.

The reference answer is split on semicolons, commas and whitespace. Tokens
longer than ``min_token_length`` are "significant"; the answer passes when
at least ``min(max_required_matches, n_significant // match_divisor)`` of
them appear as substrings of the lowercased answer.
"""

from __future__ import annotations

import logging
import re

from pedibrief.core.config import GradingConfig
from pedibrief.models import GradeResult

log = logging.getLogger(__name__)

_SPLIT_RE = re.compile(r"[;,\s]+")


def significant_tokens(reference: str, min_token_length: int = 3) -> list[str]:
    """Lowercased reference tokens longer than *min_token_length*."""
    return [t for t in _SPLIT_RE.split(reference.lower()) if len(t) > min_token_length]


def required_matches(token_count: int, policy: GradingConfig) -> int:
    threshold = min(policy.max_required_matches, token_count // policy.match_divisor)
    return max(threshold, policy.min_required_matches)


def keyword_grade(
    reference: str,
    answer: str,
    policy: GradingConfig | None = None,
) -> GradeResult:
    """Grade *answer* against *reference* without any external call.

    Never raises; an internal failure grades the answer as incorrect with
    the generic feedback string.
    """
    policy = policy or GradingConfig()
    try:
        tokens = significant_tokens(reference, policy.min_token_length)
        if not tokens:
            return GradeResult(is_correct=False, feedback=policy.generic_feedback, source="fallback")

        answer_lower = answer.lower()
        matched = [t for t in tokens if t in answer_lower]
        is_correct = len(matched) >= required_matches(len(tokens), policy)

        if is_correct:
            feedback = policy.correct_feedback
        else:
            key_points = ", ".join(part.strip() for part in reference.split(";")[:2])
            feedback = (
                f"The key points to remember are: {key_points}. "
                "Try to include these in your answer."
            )
        return GradeResult(is_correct=is_correct, feedback=feedback, source="fallback")
    except Exception:
        log.exception("Fallback grader failed; marking answer incorrect")
        return GradeResult(is_correct=False, feedback=policy.generic_feedback, source="fallback")
