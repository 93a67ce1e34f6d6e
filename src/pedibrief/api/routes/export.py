"""Export endpoints for a finished summary."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pedibrief.api.dependencies import get_settings
from pedibrief.core.config import AppSettings
from pedibrief.formatters.json_formatter import JSONFormatter
from pedibrief.models import PediatricSummary

router = APIRouter(tags=["export"])


class ExportRequest(BaseModel):
    """Summary to export, with the quiz score when one was taken."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    summary: PediatricSummary
    quiz_score: Optional[int] = Field(default=None, ge=0, le=100)


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.post("/export/pdf")
async def export_pdf(
    request: ExportRequest,
    settings: AppSettings = Depends(get_settings),
) -> Response:
    """Render the summary as a downloadable PDF."""
    try:
        from pedibrief.formatters.pdf_formatter import PDFFormatter
    except ImportError as exc:
        raise HTTPException(status_code=501, detail="PDF export requires reportlab") from exc

    formatter = PDFFormatter(settings.pdf, passing_score=settings.quiz.passing_score)
    pdf_bytes = formatter.format(request.summary, quiz_score=request.quiz_score)
    return Response(
        content=pdf_bytes,
        media_type=formatter.content_type,
        headers=_attachment(formatter.filename),
    )


@router.post("/export/json")
async def export_json(request: ExportRequest) -> Response:
    """Return the summary (and score, if given) as a downloadable JSON file."""
    formatter = JSONFormatter()
    return Response(
        content=formatter.format(request.summary, quiz_score=request.quiz_score),
        media_type=formatter.content_type,
        headers=_attachment("pedibrief-summary.json"),
    )
