"""Exception hierarchy for pedibrief."""

from __future__ import annotations


class PediBriefError(Exception):
    """Base exception for all pedibrief errors."""


class InputValidationError(PediBriefError):
    """Raised when caller-supplied input is rejected before any external call."""


class QuizValidationError(InputValidationError):
    """Raised when a quiz answer does not fit the question it targets."""


class EmailValidationError(InputValidationError):
    """Raised when a doctor email address or consent flag is missing or malformed."""


class SummarizationError(PediBriefError):
    """Raised when the summarization backend fails or returns an unusable summary."""


class GradingError(PediBriefError):
    """Raised when the grading backend response cannot be used."""


class EmailConfigurationError(PediBriefError):
    """Raised when the email transport is missing credentials or a sender."""


class EmailDeliveryError(PediBriefError):
    """Raised when the email transport rejects or fails to submit a message."""


class LLMClientError(PediBriefError):
    """Raised when LLM API calls fail after exhausting retries."""


class RetryableError(LLMClientError):
    """Rate limits, timeouts, 5xx; retried."""


class NonRetryableError(LLMClientError):
    """Auth errors, bad requests, 4xx (non-429); fail immediately."""


class JSONParseError(PediBriefError):
    """LLM response could not be parsed as JSON."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response
