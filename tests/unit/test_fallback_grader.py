"""Tests for the keyword-overlap fallback grader."""

from __future__ import annotations

from unittest.mock import patch

from pedibrief.core.config import GradingConfig
from pedibrief.quiz.fallback import keyword_grade, required_matches, significant_tokens


class TestSignificantTokens:
    def test_splits_on_semicolons_commas_and_spaces(self):
        assert significant_tokens("Fever; dehydration, lethargy now") == ["fever", "dehydration", "lethargy"]

    def test_drops_short_tokens(self):
        assert significant_tokens("call the ER now") == ["call"]

    def test_min_length_is_configurable(self):
        assert significant_tokens("call the ER now", min_token_length=1) == ["call", "the", "er", "now"]


class TestRequiredMatches:
    def test_one_match_needed_for_short_references(self):
        assert required_matches(3, GradingConfig()) == 1

    def test_floor_applies_below_divisor(self):
        assert required_matches(2, GradingConfig()) == 1

    def test_capped_at_max(self):
        assert required_matches(30, GradingConfig()) == 3

    def test_scales_with_token_count(self):
        assert required_matches(6, GradingConfig()) == 2


class TestKeywordGrade:
    def test_fever_dehydration_example_passes(self):
        result = keyword_grade("fever; dehydration; lethargy", "My child has a fever and seems dehydrated")
        assert result.is_correct is True
        assert result.source == "fallback"
        assert result.feedback == GradingConfig().correct_feedback

    def test_matching_is_case_insensitive(self):
        assert keyword_grade("Fever; Dehydration", "FEVER").is_correct is True

    def test_unrelated_answer_fails_with_key_points(self):
        result = keyword_grade("fever; dehydration; lethargy", "I don't know")
        assert result.is_correct is False
        assert "fever, dehydration" in result.feedback
        assert "lethargy" not in result.feedback

    def test_reference_without_significant_tokens_fails(self):
        result = keyword_grade("ER; go", "go to the ER")
        assert result.is_correct is False
        assert result.feedback == GradingConfig().generic_feedback

    def test_custom_policy_raises_the_bar(self):
        policy = GradingConfig(min_required_matches=2)
        assert keyword_grade("fever; dehydration; lethargy", "fever", policy).is_correct is False
        assert keyword_grade("fever; dehydration; lethargy", "fever and lethargy", policy).is_correct is True

    def test_never_raises_on_internal_failure(self):
        with patch("pedibrief.quiz.fallback.significant_tokens", side_effect=RuntimeError("boom")):
            result = keyword_grade("fever", "fever")
        assert result.is_correct is False
        assert result.feedback == GradingConfig().generic_feedback

    def test_empty_answer_is_incorrect(self):
        assert keyword_grade("fever; dehydration", "").is_correct is False
