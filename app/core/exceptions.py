# File: app/core/exceptions.py
from typing import Any, Dict, Optional


class ReviewServiceError(Exception):
    """Base class for every error a review operation can surface to its caller."""

    status_code = 500

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message}
        payload.update(self.context)
        return payload


class ValidationError(ReviewServiceError):
    """Malformed input. ``fields`` maps each offending field to a message."""

    status_code = 400

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None, **context: Any):
        if fields:
            context["fields"] = fields
        super().__init__(message, **context)
        self.fields = fields or {}


class NotFound(ReviewServiceError):
    status_code = 404


class Forbidden(ReviewServiceError):
    status_code = 403


class Conflict(ReviewServiceError):
    status_code = 409


class ServerError(ReviewServiceError):
    status_code = 500

    def __init__(self, message: str = "Server error", **context: Any):
        super().__init__(message, **context)
