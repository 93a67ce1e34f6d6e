"""Doctor notification endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from pedibrief.api.dependencies import get_notifier
from pedibrief.models import SendEmailRequest, SendEmailResponse
from pedibrief.notify.service import NotificationService

router = APIRouter(tags=["email"])


@router.post("/send-doctor-email", response_model=SendEmailResponse)
async def send_doctor_email(
    request: SendEmailRequest,
    notifier: NotificationService = Depends(get_notifier),
) -> SendEmailResponse:
    """Email de-identified quiz results to the treating physician.

    Failures come back as ``success=false`` with a message rather than an
    error status, so the client can show them inline.
    """
    return await notifier.send_quiz_results(request)
