"""Legally Legit error taxonomy

None of these are fatal; every one is recoverable at the HTTP boundary by the
user re-submitting the action. Nothing is retried automatically.
"""

from typing import Dict, Optional


class LegallyLegitError(Exception):
    """Base class for product errors."""

    error_code = "LEGALLY_LEGIT_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(LegallyLegitError):
    """Required form fields missing or unknown fields supplied.

    Raised before any network call.
    """

    error_code = "VALIDATION_FAILED"

    def __init__(self, fields: Dict[str, str]):
        super().__init__("Please complete all required fields.")
        self.fields = fields


class UnknownTemplateError(LegallyLegitError):
    error_code = "TEMPLATE_NOT_FOUND"


class GenerationFailure(LegallyLegitError):
    """The model answered, but the payload was empty, unparseable or off-schema."""

    error_code = "GENERATION_FAILED"


class ServiceUnavailable(LegallyLegitError):
    """Transport-level failure (network, timeout, API error) during generation."""

    error_code = "SERVICE_UNAVAILABLE"


class AssistantFailure(LegallyLegitError):
    """The assistant stream failed.

    Text already handed to the chunk callback is kept in ``partial_answer``.
    """

    error_code = "ASSISTANT_FAILED"

    def __init__(self, message: str, partial_answer: str = "", cause: Optional[BaseException] = None):
        super().__init__(message)
        self.partial_answer = partial_answer
        self.cause = cause


class InvalidProfileState(LegallyLegitError):
    """Profile counters are malformed (e.g. negative). Programmer error."""

    error_code = "INVALID_PROFILE_STATE"


class QuizCompletedError(LegallyLegitError):
    error_code = "QUIZ_COMPLETED"
