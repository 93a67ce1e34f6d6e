"""Prompt templates for the summarization and grading calls."""

from __future__ import annotations

from pedibrief.prompts.templates import (
    GRADING_PROMPT,
    GRADING_SYSTEM_PROMPT,
    SUMMARIZATION_DOCUMENT_PROMPT,
    SUMMARIZATION_SYSTEM_PROMPT,
    SUMMARIZATION_TEXT_PROMPT,
)

__all__ = [
    "GRADING_PROMPT",
    "GRADING_SYSTEM_PROMPT",
    "SUMMARIZATION_DOCUMENT_PROMPT",
    "SUMMARIZATION_SYSTEM_PROMPT",
    "SUMMARIZATION_TEXT_PROMPT",
]
