"""Custom exception classes"""

from typing import Any, Optional


class PortalException(Exception):
    """Base exception for the registration portal"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(PortalException):
    """Exception for malformed or missing input"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class ConflictException(PortalException):
    """Exception for uniqueness violations

    Rendered as 400 like the other submission errors; ``field`` names the
    column that collided.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        details = {"field": field} if field else None
        super().__init__(message, status_code=400, details=details)


class NotFoundException(PortalException):
    """Exception for resource not found errors"""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class AuthenticationException(PortalException):
    """Exception for authentication errors"""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, status_code=401)


class RateLimitException(PortalException):
    """Exception for rate limit errors"""

    def __init__(self, message: str = "Rate limit exceeded", retry_after: Optional[int] = None):
        self.retry_after = retry_after
        details = {"retry_after": retry_after} if retry_after is not None else None
        super().__init__(message, status_code=429, details=details)


class PayloadTooLargeException(PortalException):
    """Exception for uploads exceeding a size or count limit"""

    def __init__(self, message: str, limit_name: str, limit: int):
        self.limit_name = limit_name
        self.limit = limit
        super().__init__(
            message,
            status_code=413,
            details={"limit_name": limit_name, "limit": limit}
        )


class NotificationException(PortalException):
    """Exception for outbound notification failures"""

    def __init__(self, message: str):
        super().__init__(f"Notification failed: {message}", status_code=502)
