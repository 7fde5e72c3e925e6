"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handler
in main.py. Every payload carries a stable `success` flag and a
human-readable `message`.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


# ── 400 ─────────────────────────────────────────────────────────────

class ValidationError(DomainError):
    """Validation error (400)."""
    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        if field:
            message = f"Validation error on {field}: {message}"
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class MissingParametersError(ValidationError):
    """A required request field was absent or empty."""
    def __init__(self, message: str = "Payment Failed: Missing parameters", missing: list[str] | None = None):
        super().__init__(message, details={"missing": missing} if missing else None)


class EmptyOrderError(ValidationError):
    def __init__(self, message: str = "Please Provide Course ID"):
        super().__init__(message)


class DuplicateCourseError(ValidationError):
    """The same course id appears more than once in one order."""
    def __init__(self, course_ids: list[str], message: str = "Duplicate course in order"):
        super().__init__(message, details={"duplicates": course_ids})


class InvalidTotalError(ValidationError):
    """Accumulated order total is not strictly positive."""
    def __init__(self, message: str = "Invalid total amount"):
        super().__init__(message)


class InvalidSignatureError(DomainError):
    """Gateway callback signature did not match (400)."""
    def __init__(self, message: str = "Payment Failed: Invalid signature"):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


class PaymentCancelledError(DomainError):
    """The gateway reported that the user cancelled the payment (400, non-retryable)."""
    def __init__(
        self,
        message: str = "Your payment has been cancelled. Try again or complete the payment later.",
    ):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST)


# ── 401 ─────────────────────────────────────────────────────────────

class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


# ── 404 ─────────────────────────────────────────────────────────────

class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None, message: str | None = None):
        message = message or f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)
        self.identifier = identifier


class CourseNotFoundError(NotFoundError):
    def __init__(self, course_id: str, message: str = "Could not find the Course", details: dict | None = None):
        super().__init__("Course", course_id, details=details, message=message)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str, message: str = "User not found", details: dict | None = None):
        super().__init__("User", user_id, details=details, message=message)


# ── Declined (reported with HTTP 200, success=false) ────────────────

class ConflictError(DomainError):
    """Resource conflict (409)."""
    def __init__(self, message: str, status_code: int = status.HTTP_409_CONFLICT, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class AlreadyEnrolledError(ConflictError):
    """
    The student is already in a requested course.

    This is a declined request, not a failure: it is answered with HTTP 200
    and success=false.
    """
    def __init__(self, course_id: str, message: str = "Student is already Enrolled"):
        super().__init__(message, status_code=status.HTTP_200_OK, details={"course_id": course_id})
        self.course_id = course_id


# ── 500 ─────────────────────────────────────────────────────────────

class UpstreamError(DomainError):
    """A dependency (gateway, store, mail) failed. Message is safe to show."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)


class GatewayOrderError(UpstreamError):
    def __init__(self, message: str | None = None):
        super().__init__(message or "Could not initiate order.")


class EmailDeliveryError(UpstreamError):
    def __init__(self, message: str = "Could not send email", details: dict | None = None):
        super().__init__(message, details=details)


class EnrollmentError(UpstreamError):
    def __init__(self, message: str = "Enrollment failed", details: dict | None = None):
        super().__init__(message, details=details)
