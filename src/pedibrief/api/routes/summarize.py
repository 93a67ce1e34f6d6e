"""Summarization endpoints: pasted text or an uploaded document."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from pedibrief.api.dependencies import get_summarizer
from pedibrief.models import PediatricSummary
from pedibrief.services.summarizer import SummarizationService

log = logging.getLogger(__name__)

router = APIRouter(tags=["summarize"])


class SummarizeRequest(BaseModel):
    """Pasted discharge summary text."""

    text: str


@router.post("/summarize", response_model=PediatricSummary)
async def summarize_text(
    request: SummarizeRequest,
    summarizer: SummarizationService = Depends(get_summarizer),
) -> PediatricSummary:
    """Simplify pasted discharge text into a parent-friendly summary with a quiz."""
    return await summarizer.summarize_text(request.text)


@router.post("/summarize/file", response_model=PediatricSummary)
async def summarize_file(
    file: UploadFile = File(...),
    summarizer: SummarizationService = Depends(get_summarizer),
) -> PediatricSummary:
    """Simplify an uploaded PDF or image of discharge paperwork."""
    data = await file.read()
    return await summarizer.summarize_document(
        data,
        file.filename or "upload",
        file.content_type,
    )
