"""
Error taxonomy for the Pluxo API.

Services raise these; ``app.main`` renders every ``PluxoError`` as
``{"error": <label>, "detail": <message>}`` with the class status code.
"""

from typing import Optional


class PluxoError(Exception):
    """Base exception for all Pluxo errors."""

    status_code = 500
    label = "InternalError"
    public_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None, headers: Optional[dict[str, str]] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message
        self.headers = headers or {}

    def to_dict(self) -> dict[str, str]:
        return {"error": self.label, "detail": self.message}


class AuthRequired(PluxoError):
    status_code = 401
    label = "AuthRequired"
    public_message = "Authentication required"


class AccessDenied(PluxoError):
    """Authorization denial; ``reason`` is one of the DenyReason labels."""

    status_code = 403
    label = "AccessDenied"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or f"RESTRICTED: {reason}")
        self.reason = reason
        self.label = reason


class ValidationFailed(PluxoError):
    status_code = 400
    label = "ValidationFailed"
    public_message = "Invalid request"


class InvalidPlanOption(ValidationFailed):
    label = "InvalidPlanOption"
    public_message = "Invalid plan or duration option"


class NotFound(PluxoError):
    status_code = 404
    label = "NotFound"
    public_message = "Not found"


class GrantConflict(PluxoError):
    """The grant could not be applied; nothing was changed and the call can be retried."""

    status_code = 409
    label = "GrantConflict"
    public_message = "Subscription grant conflicted with a concurrent change, retry"


class RateLimited(PluxoError):
    status_code = 429
    label = "RateLimited"
    public_message = "Too many requests"

    def __init__(self, retry_after_seconds: int, message: Optional[str] = None):
        super().__init__(message, headers={"Retry-After": str(max(1, int(retry_after_seconds)))})
        self.retry_after_seconds = retry_after_seconds


class DependencyUnavailable(PluxoError):
    """The data store or identity provider could not be reached."""

    status_code = 500
    label = "DependencyUnavailable"
    public_message = "Service temporarily unavailable"
