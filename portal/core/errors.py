"""Error taxonomy shared by services and the HTTP layer.

Services raise these; ``register_exception_handlers`` turns them into JSON
responses of the form ``{"detail": <message>, "code": <kind>}`` so clients can
branch on ``code`` instead of parsing messages.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PortalError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    code = "validation_error"
    default_message = "Invalid request"


class InvalidEvaluation(ValidationError):
    code = "invalid_evaluation"
    default_message = "Grade must be an integer between 0 and 100 and feedback is required"


class AuthenticationError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    default_message = "Not authenticated"


class AuthorizationError(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "not_authorized"
    default_message = "You are not authorized to perform this action"


class NotFoundError(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(PortalError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Resource already exists"


class DuplicateSubmission(Conflict):
    code = "duplicate_submission"
    default_message = "You have already submitted this assessment"


class AlreadyChallenged(Conflict):
    code = "already_challenged"
    default_message = "This submission already has a challenge"


class NoPendingChallenge(Conflict):
    code = "no_pending_challenge"
    default_message = "This submission does not have a pending or reviewing challenge"


class AssessmentLocked(Conflict):
    code = "assessment_locked"
    default_message = "This assessment already has submissions"


class InactiveAssessment(PortalError):
    code = "inactive_assessment"
    default_message = "This assessment is no longer active"


def _error_body(message: str, code: str) -> dict:
    return {"detail": message, "code": code}


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, exc.code),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # keep the first problem readable; the full list is still useful for forms
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    body = _error_body(message, ValidationError.code)
    body["errors"] = [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")} for e in errors
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Internal server error", "internal_error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
