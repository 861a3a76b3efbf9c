"""
Domain exceptions raised by the service layer.
Each carries the HTTP status and a short error title; the API layer renders
them as {"error": ..., "message": ...}.
"""

from fastapi import status


class ReWearError(Exception):
    """Base class for expected, client-visible failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error: str = "Bad request"
    headers: dict[str, str] | None = None

    def __init__(self, message: str, error: str | None = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class NotFoundError(ReWearError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class PermissionDeniedError(ReWearError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Access denied"


class InvalidOperationError(ReWearError):
    """Request is well-formed but not allowed in the current state."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid operation"


class ConflictError(ReWearError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"


class UpstreamError(ReWearError):
    """An external collaborator (media host) failed on the request path."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error = "Upstream failure"


class RateLimitedError(ReWearError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    error = "Too many requests"

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.headers = {"Retry-After": str(retry_after)}
