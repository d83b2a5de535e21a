"""HTTP mapping of Legally Legit errors"""

from fastapi import HTTPException

from legallylegit.errors import (
    FormValidationError,
    GenerationFailure,
    LegallyLegitError,
    ServiceUnavailable,
    UnknownTemplateError,
)
from legallylegit.models.profile import EntitlementExhausted


def entitlement_exhausted(exhausted: EntitlementExhausted) -> HTTPException:
    return HTTPException(
        status_code=402,
        detail={
            "error_code": "ENTITLEMENT_EXHAUSTED",
            "action": exhausted.action.value,
            "message": exhausted.message,
            "upgrade_url": exhausted.upgrade_url,
        },
    )


def not_found(message: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"error_code": "NOT_FOUND", "message": message})


def to_http_exception(error: LegallyLegitError) -> HTTPException:
    if isinstance(error, FormValidationError):
        return HTTPException(
            status_code=422,
            detail={"error_code": error.error_code, "message": error.message, "fields": error.fields},
        )
    if isinstance(error, UnknownTemplateError):
        return HTTPException(status_code=404, detail={"error_code": error.error_code, "message": error.message})
    if isinstance(error, GenerationFailure):
        status_code = 502
    elif isinstance(error, ServiceUnavailable):
        status_code = 503
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail={"error_code": error.error_code, "message": error.message})
