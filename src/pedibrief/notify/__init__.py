"""Doctor notification: email formatting handoff and transports."""

from pedibrief.notify.service import NotificationService, build_report, validate_doctor_email
from pedibrief.notify.transports import GmailTransport, IEmailTransport, SMTPTransport, create_transport

__all__ = [
    "GmailTransport",
    "IEmailTransport",
    "NotificationService",
    "SMTPTransport",
    "build_report",
    "create_transport",
    "validate_doctor_email",
]
