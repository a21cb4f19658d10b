# wayfare/shared/exceptions.py
from typing import Optional

from fastapi import HTTPException, status


class BaseHTTPException(HTTPException):
    """
    HTTPException with class-level defaults.

    Subclasses set ``status_code`` and ``message``; a per-instance message
    may still be passed to override the default.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Bad request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            status_code=type(self).status_code, detail=message or type(self).message
        )


# Authentication & Authorization Exceptions
class UnauthenticatedError(BaseHTTPException):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class InvalidTokenError(UnauthenticatedError):
    message = "Invalid or expired token"


class PermissionDeniedError(BaseHTTPException):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


# Resource Not Found Exceptions
class NotFoundError(BaseHTTPException):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class AgencyNotFoundError(NotFoundError):
    message = "Agency not found"


class MemberNotFoundError(NotFoundError):
    message = "Member not found"


# Validation / Request Exceptions
class InvalidOperationError(BaseHTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid operation"


class ConfigurationError(BaseHTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Service is not configured"
