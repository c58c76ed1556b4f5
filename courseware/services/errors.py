"""Error taxonomy shared by the services and the HTTP layer.

Each class carries the HTTP status it maps to and a short public message.
The message is what the client sees; internal detail (ids, storage paths,
driver errors) stays in the exception's cause and in the logs.
"""

from __future__ import annotations


class CoursewareError(Exception):
    status_code = 500
    public_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)
        if message is not None:
            self.public_message = message


class ValidationError(CoursewareError):
    """Malformed or missing input.  Never retried."""

    status_code = 400
    public_message = "Invalid request"


class AuthenticationError(CoursewareError):
    """Caller identity could not be verified."""

    status_code = 401
    public_message = "Unauthorized"


class AuthorizationError(CoursewareError):
    """Resource exists but the caller lacks the owner/role relationship."""

    status_code = 403
    public_message = "Forbidden"


class NotFoundError(CoursewareError):
    """Target does not exist (possibly already deleted by a concurrent call)."""

    status_code = 404
    public_message = "Not found"


class DependencyFailure(CoursewareError):
    """A data-layer or storage call failed for a reason other than "already gone".

    Safe to retry: every cascade step is idempotent, so a retry picks up
    where this attempt stopped.
    """

    status_code = 500
    public_message = "Operation failed, please retry"

    def __init__(self, step: str, cause: Exception) -> None:
        super().__init__()
        self.step = step
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.step}: {self.cause}"


class ConflictError(CoursewareError):
    """The request is valid but the current state forbids it."""

    status_code = 409
    public_message = "Conflict"


class ServiceMisconfigured(CoursewareError):
    """A feature was called whose settings are missing."""

    status_code = 500
    public_message = "Server misconfigured"
