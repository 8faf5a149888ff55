"""Error taxonomy shared by services and routes."""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class MicroGuideError(Exception):
    """Base class for errors that carry an API error code."""

    code = "INTERNAL_ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFound(MicroGuideError):
    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class NotAuthorized(MicroGuideError):
    code = "NOT_AUTHORIZED"
    status_code = status.HTTP_403_FORBIDDEN


class UpstreamFailure(MicroGuideError):
    """A collaborator (store or completion service) failed; message passed through."""

    code = "UPSTREAM_FAILURE"
    status_code = status.HTTP_502_BAD_GATEWAY


class MalformedUpstreamResponse(UpstreamFailure):
    """The completion service answered with something we could not parse."""

    code = "MALFORMED_UPSTREAM_RESPONSE"


class ValidationFailure(MicroGuideError):
    code = "VALIDATION_FAILED"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


async def microguide_error_handler(
    request: Request, exc: MicroGuideError
) -> JSONResponse:
    """Render errors in the same envelope the rate limiter uses."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "code": exc.code,
                "message": exc.message,
                "details": exc.details,
            }
        },
    )
