"""
Error taxonomy for the Campus Books API.

Every error renders to the same envelope, ``{"error": true, "message": ...}``,
through the single exception handler registered in :mod:`main`.
"""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    """Base class for errors that terminate a request with a JSON envelope."""

    status_code = 500
    default_message = "internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": True, "message": self.message}


class Unauthorized(ApiError):
    """Missing, malformed, invalid or expired bearer token."""

    status_code = 401
    default_message = "unauthorized access"


class Forbidden(ApiError):
    """Authenticated, but not the owner of the targeted resource."""

    status_code = 403
    default_message = "forbidden access"


class NotFound(ApiError):
    status_code = 404
    default_message = "not found"


class BadRequest(ApiError):
    status_code = 400
    default_message = "bad request"


class Conflict(ApiError):
    status_code = 409
    default_message = "already exists"


class PartialFailure(ApiError):
    """A multi-document write where a later step did not apply.

    ``completed`` and ``failed`` name the steps so the caller can tell which
    documents reflect the request.
    """

    status_code = 500
    default_message = "operation partially applied"

    def __init__(self, message: Optional[str] = None,
                 completed: Optional[List[str]] = None,
                 failed: Optional[List[str]] = None):
        super().__init__(message)
        self.completed = completed or []
        self.failed = failed or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"partial": True, "completed": self.completed, "failed": self.failed})
        return data


class InvalidOrExpiredToken(Exception):
    """Token failed verification. Never exposed to clients as-is."""
