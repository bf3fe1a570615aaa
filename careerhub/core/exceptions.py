"""
Error taxonomy shared by routes and services.

Every failure a request can end in maps to one of these classes; the
handlers in main.py turn them into JSON error bodies.
"""

from typing import Optional


class CareerHubError(Exception):
    """Base exception carrying an error code and HTTP status."""

    def __init__(self, message: str, code: str = "INTERNAL_SERVER_ERROR", status_code: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class AuthorizationError(CareerHubError):
    """Wrong role, missing session or not the resource owner. Never says which."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message=message, code="UNAUTHORIZED", status_code=401)


class ValidationError(CareerHubError):
    """Rejected write: out-of-range values, missing fields, duplicates, bad transitions."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=400)


class NotFoundError(CareerHubError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message=message, code="NOT_FOUND", status_code=404)


class UpstreamServiceError(CareerHubError):
    """A video, transcription, LLM or storage provider call failed."""

    def __init__(self, message: str, provider: Optional[str] = None) -> None:
        super().__init__(message=message, code="UPSTREAM_ERROR", status_code=502)
        self.provider = provider
