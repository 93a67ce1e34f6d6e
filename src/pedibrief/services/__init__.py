"""Application services: intake validation and summarization."""

from __future__ import annotations

from pedibrief.services.intake import DocumentUpload, validate_document, validate_text
from pedibrief.services.summarizer import SummarizationService, normalize_summary_payload

__all__ = [
    "DocumentUpload",
    "SummarizationService",
    "normalize_summary_payload",
    "validate_document",
    "validate_text",
]
