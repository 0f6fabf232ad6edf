"""
Domain exceptions for the forum.

Services raise these; main.py maps them to HTTP responses through centralized
exception handlers, so the service layer never depends on FastAPI.

Every exception carries a correlation ID that is echoed in the error response
and tagged on the matching Sentry event.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    pass


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    pass


class ValidationException(DomainException):
    """Raised when input validation fails."""

    pass


class ConflictException(DomainException):
    """Raised when operation conflicts with existing data."""

    pass


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    pass


class AlreadyExistsException(DomainException):
    """Raised when trying to create a resource that already exists."""

    pass


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    pass


# Entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    pass


class UserAlreadyExistsException(AlreadyExistsException):
    """Username or email already registered."""

    pass


class TopicNotFoundException(NotFoundException):
    """Topic not found (or soft-deleted)."""

    def __init__(self, topic_id: int):
        super().__init__(f"Topic with ID {topic_id} not found")
        self.topic_id = topic_id


class PostNotFoundException(NotFoundException):
    """Post or reply not found."""

    def __init__(self, post_id: int):
        super().__init__(f"Post with ID {post_id} not found")
        self.post_id = post_id


# Identity and permissions


class UnauthenticatedException(AuthenticationException):
    """No logged-in user for an action that requires one."""

    def __init__(self, message: str = "You must be logged in to do this"):
        super().__init__(message)


class InvalidCredentialsException(AuthenticationException):
    """Invalid username or password."""

    pass


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have the required capability."""

    pass


class UserBlockedException(PermissionDeniedException):
    """Raised when a blocked user attempts a content-producing action."""

    def __init__(self, username: str):
        super().__init__(f"User {username} is blocked and cannot perform this action")
        self.username = username


class CannotModifyOthersContentException(PermissionDeniedException):
    """Raised when a user edits or deletes content they don't own."""

    def __init__(self, message: str = "You can only modify your own content"):
        super().__init__(message)


# ============================================================================
# Voting
# ============================================================================


class VoteWouldBeNegativeException(BusinessRuleException):
    """Raised when a downvote would push a topic score below zero."""

    def __init__(self, topic_id: int):
        super().__init__("A topic's score cannot go below zero")
        self.topic_id = topic_id


# ============================================================================
# Reports
# ============================================================================


class ReportException(DomainException):
    """Base exception for user report errors."""

    pass


class SelfReportDeniedException(ReportException):
    """Raised when a user tries to report themselves."""

    def __init__(self, message: str = "You cannot report yourself"):
        super().__init__(message)


class ReportCooldownActiveException(ReportException):
    """Raised when the reporter must wait before reporting the same user again."""

    def __init__(self, reported_username: str, remaining_ms: int, formatted: str):
        super().__init__(
            f"You already reported {reported_username} recently. "
            f"Try again in {formatted}"
        )
        self.reported_username = reported_username
        self.remaining_ms = remaining_ms
        self.formatted = formatted


class ReportNotFoundException(ReportException):
    """Raised when a report is not found."""

    def __init__(self, report_id: int):
        super().__init__(f"Report with ID {report_id} not found")
        self.report_id = report_id


class ReportAlreadyReviewedException(ReportException):
    """Raised when an admin reviews a report that is no longer pending."""

    def __init__(self, message: str = "This report has already been reviewed"):
        super().__init__(message)


# ============================================================================
# Rate Limiting
# ============================================================================


class RateLimitExceededException(DomainException):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again later.",
        retry_after: int | None = None,
    ):
        super().__init__(message)
        self.retry_after = retry_after
