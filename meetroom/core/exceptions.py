"""Custom exception classes for Meetroom."""

from fastapi import HTTPException, status


class MeetroomError(Exception):
    """Base exception for Meetroom."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(MeetroomError):
    """Raised when credentials or a session are rejected."""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(MeetroomError):
    """Raised when user lacks permission."""
    status_code = status.HTTP_403_FORBIDDEN


class ResourceNotFoundError(MeetroomError):
    """Raised when a requested resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND


class ResourceConflictError(MeetroomError):
    """Raised when a resource already exists or is still referenced."""
    status_code = status.HTTP_409_CONFLICT


class ValidationError(MeetroomError):
    """Raised when input validation fails."""
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(MeetroomError):
    """Raised when a write succeeded but its result cannot be read back."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# HTTP exception shortcuts
def forbidden(detail: str = "Insufficient permissions") -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


def unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )
