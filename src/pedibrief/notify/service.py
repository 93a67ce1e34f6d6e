"""Doctor notification: validate, de-identify, format and send once."""

from __future__ import annotations

import asyncio
import logging
import socket

import httplib2
from google.auth.exceptions import TransportError

from pedibrief.core.config import EmailConfig, QuizConfig
from pedibrief.core.identifiers import generate_deidentified_id
from pedibrief.exceptions import EmailConfigurationError, EmailDeliveryError, EmailValidationError
from pedibrief.formatters.email_formatter import EmailFormatter
from pedibrief.models import DoctorReport, SendEmailRequest, SendEmailResponse
from pedibrief.notify.transports import IEmailTransport
from pedibrief.quiz.reconciliation import reconcile, score_quiz

log = logging.getLogger(__name__)

CONNECTION_FAILED_MESSAGE = (
    "Cannot connect to the email service. Check the email transport settings and try again."
)
NOT_CONFIGURED_MESSAGE = "Email notifications are not configured on this server."
UNEXPECTED_FAILURE_MESSAGE = "The email could not be sent because of an unexpected error. Please try again later."

_CONNECTION_ERRORS = (
    ConnectionError,
    TimeoutError,
    socket.gaierror,
    httplib2.ServerNotFoundError,
    TransportError,
)


def validate_doctor_email(address: str) -> str:
    """Return the trimmed address; it needs text on both sides of a single ``@``."""
    cleaned = (address or "").strip()
    local, sep, domain = cleaned.partition("@")
    if not sep or not local or not domain or "@" in domain:
        raise EmailValidationError("Please enter a valid doctor email address")
    return cleaned


def validate_request(request: SendEmailRequest) -> str:
    """Check address and consent; returns the cleaned doctor address."""
    address = validate_doctor_email(request.doctor_email)
    if not request.consent_given:
        raise EmailValidationError(
            "Please confirm that you consent to share quiz results with your doctor"
        )
    return address


def build_report(
    request: SendEmailRequest,
    patient_id: str,
    *,
    quiz_config: QuizConfig | None = None,
) -> DoctorReport:
    """Assemble the de-identified payload handed to the email formatter.

    The score is recomputed from the answers unless the caller supplied one.
    Unanswered questions are omitted from ``quiz_data``.
    """
    quiz_config = quiz_config or QuizConfig()
    records = reconcile(request.summary, request.quiz_answers)
    score = request.quiz_score
    if score is None:
        score = score_quiz(
            request.summary,
            request.quiz_answers,
            unanswered=quiz_config.unanswered_policy,
        ).score
    return DoctorReport(
        doctor_email=request.doctor_email.strip(),
        quiz_score=score,
        quiz_data=records,
        summary=request.summary,
        patient_id=patient_id,
    )


class NotificationService:
    """Sends quiz results to a physician through one transport attempt."""

    def __init__(
        self,
        transport: IEmailTransport | None,
        formatter: EmailFormatter | None = None,
        config: EmailConfig | None = None,
        quiz_config: QuizConfig | None = None,
    ) -> None:
        self._transport = transport
        self._config = config or EmailConfig()
        self._formatter = formatter or EmailFormatter(self._config)
        self._quiz_config = quiz_config or QuizConfig()

    async def send_quiz_results(self, request: SendEmailRequest) -> SendEmailResponse:
        """Validate and send; every failure is reported, never raised."""
        try:
            address = validate_request(request)
        except EmailValidationError as e:
            return SendEmailResponse(success=False, message=str(e))

        patient_id = generate_deidentified_id(self._config.id_prefix)
        if self._transport is None:
            log.warning("Email requested but no transport is configured", extra={"patient_id": patient_id})
            return SendEmailResponse(success=False, message=NOT_CONFIGURED_MESSAGE, patient_id=patient_id)

        report = build_report(request, patient_id, quiz_config=self._quiz_config)
        content = self._formatter.format(report)

        try:
            message_id = await asyncio.to_thread(self._transport.send, address, content.subject, content.html)
        except EmailConfigurationError as e:
            log.error("Email transport misconfigured: %s", e, extra={"patient_id": patient_id})
            return SendEmailResponse(success=False, message=str(e), patient_id=patient_id)
        except EmailDeliveryError as e:
            log.warning("Email delivery failed", extra={"patient_id": patient_id})
            message = CONNECTION_FAILED_MESSAGE if isinstance(e.__cause__, _CONNECTION_ERRORS) else str(e)
            return SendEmailResponse(success=False, message=message, patient_id=patient_id)
        except Exception:
            log.exception("Unexpected email transport failure", extra={"patient_id": patient_id})
            return SendEmailResponse(success=False, message=UNEXPECTED_FAILURE_MESSAGE, patient_id=patient_id)

        log.info(
            "Quiz results sent",
            extra={"patient_id": patient_id, "score": report.quiz_score, "records": len(report.quiz_data)},
        )
        return SendEmailResponse(
            success=True,
            message="Email sent successfully",
            patient_id=patient_id,
            message_id=message_id,
        )
