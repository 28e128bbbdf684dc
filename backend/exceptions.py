"""
Error taxonomy.

Each error maps to an HTTP status and renders as
{"success": false, "error": <summary>, "details": <message>}.
"""


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str = "", *, error: str | None = None, details: str | None = None):
        super().__init__(message or self.error)
        self.message = message or self.error
        if error is not None:
            self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.error}
        details = self.details if self.details is not None else self.message
        if details and details != self.error:
            body["details"] = details
        return body


class ValidationError(AppError):
    """Missing or malformed required input."""

    status_code = 400
    error = "Invalid request"

    def __init__(self, message: str, **kwargs):
        # The message is already field-specific; surface it as the summary
        kwargs.setdefault("error", message)
        super().__init__(message, **kwargs)


class AuthenticationError(AppError):
    """Missing or undecryptable credentials."""

    status_code = 401
    error = "Unauthorized"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error", message)
        super().__init__(message, **kwargs)


class NotFoundError(AppError):
    """Referenced session or user does not exist."""

    status_code = 404
    error = "Not found"

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error", message)
        super().__init__(message, **kwargs)


class ExternalServiceError(AppError):
    """Non-success response from the search API, agent platform or database."""

    status_code = 500
    error = "External service error"

    def __init__(self, message: str, *, status: int | None = None, body: str | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status = status
        self.body = body


class SearchTimeoutError(AppError):
    """Candidate search did not reach a terminal status within the poll budget."""

    status_code = 500
    error = "Search timed out"
