"""Failures raised by the services.

Each kind carries the HTTP status and error code the API renders it with.
"""


class ShareItError(Exception):
    status_code = 500
    error_code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ShareItError):
    """Referenced user, item, request or booking does not exist."""
    status_code = 404
    error_code = "NOT_FOUND"


class ValidationError(ShareItError):
    """The request breaks a precondition; the message names the rule."""
    status_code = 400
    error_code = "VALIDATION_ERROR"


class ConflictError(ShareItError):
    """The stored state no longer allows the change (stale caller, duplicate email)."""
    status_code = 409
    error_code = "CONFLICT"


class ForbiddenError(ShareItError):
    status_code = 403
    error_code = "FORBIDDEN"
