"""Application exception classes.

Managers raise these; the handlers registered in ``app.main`` turn them into
JSON responses carrying only the client-safe message.
"""

from fastapi import status


class RecruitingAPIError(Exception):
    """Base exception for all application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        """Initialize the exception.

        Args:
            message: Client-safe description of the failure.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(RecruitingAPIError):
    """Raised when request input is missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(RecruitingAPIError):
    """Raised when a credential is missing, invalid or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class AuthorizationError(RecruitingAPIError):
    """Raised on a role mismatch or an unverified account."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(RecruitingAPIError):
    """Raised when a requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(RecruitingAPIError):
    """Raised when a unique key would be duplicated."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class InternalError(RecruitingAPIError):
    """Raised for unexpected database or IO failures."""

    pass
