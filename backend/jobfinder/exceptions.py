"""Error taxonomy shared by services and routes.

Every error carries the HTTP status it maps to and a short ``error`` title.
``to_dict`` produces the JSON body rendered by the exception handler in
``jobfinder.main``.
"""

from typing import Any


class JobFinderError(Exception):
    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.error
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "message": self.message}


class Unauthorized(JobFinderError):
    status_code = 401
    error = "Unauthorized"


class NotFound(JobFinderError):
    status_code = 404
    error = "Not found"


class ValidationError(JobFinderError):
    status_code = 400
    error = "Validation Error"

    def __init__(self, message: str | None = None, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        if self.fields:
            body["fields"] = self.fields
        return body


class AlreadyExists(JobFinderError):
    """Duplicate favorite. Not a failure: ``existing`` holds the stored row."""

    status_code = 409
    error = "Already in favorites"

    def __init__(self, message: str | None = None, existing: Any = None):
        super().__init__(message)
        self.existing = existing


class UpstreamError(JobFinderError):
    status_code = 502
    error = "External API Error"

    def __init__(self, message: str | None = None, upstream_status: int | None = None, details: str | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body = super().to_dict()
        body["upstreamStatus"] = self.upstream_status
        return body


class ServiceUnavailable(JobFinderError):
    status_code = 503
    error = "Service Unavailable"


class InternalError(JobFinderError):
    status_code = 500
    error = "Internal Server Error"
