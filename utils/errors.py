"""
Error taxonomy for the API.

Every handler raises one of these at its boundary; ``api.py`` renders them as
``{"error": ..., "details": ...}`` JSON with the matching status code.
"""

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Base class for errors that map straight to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class Unauthenticated(ApiError):
    """Missing, malformed or unresolvable bearer credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class Forbidden(ApiError):
    """Authenticated, but lacking the required role."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class BadRequest(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UpstreamFailure(ApiError):
    """Identity, storage or data-store call failed or returned non-2xx."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Upstream service error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message, details)
        self.upstream_status = upstream_status


class InternalError(ApiError):
    """Wraps an unexpected exception; its text is returned as ``message``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.cause is not None:
            payload["message"] = str(self.cause)
        return payload


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Render an ApiError as the JSON error payload."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


__all__ = [
    "ApiError",
    "Unauthenticated",
    "Forbidden",
    "BadRequest",
    "UpstreamFailure",
    "InternalError",
    "api_error_handler",
]
