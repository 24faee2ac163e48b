"""Domain errors raised by the services.

Routers do not translate these one by one; ``coursegate.main`` registers a
handler that turns any ``CourseGateError`` into the standard error envelope.
"""

from typing import Optional


class CourseGateError(Exception):
    status_code = 500
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(CourseGateError):
    """Raised when a course or one of its records is absent or mismatched."""

    status_code = 404
    default_message = "Not found"


class ForbiddenError(CourseGateError):
    """Raised when the principal's role or course access is insufficient."""

    status_code = 403
    default_message = "Forbidden"


class UnauthorizedError(CourseGateError):
    """Raised when an operation needs a principal and none was supplied."""

    status_code = 401
    default_message = "Sign in required"


class ValidationError(CourseGateError):
    """Raised for missing or contradictory input the schema cannot catch."""

    status_code = 400
    default_message = "Invalid request"
