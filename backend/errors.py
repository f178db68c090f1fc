"""
Error taxonomy for the Team Tasks API.

Every error a handler can raise maps to one HTTP status code. The classes
subclass FastAPI's HTTPException so they travel through the normal FastAPI
machinery; main.py renders all of them in the standard response envelope:

    {"success": false, "message": "<detail>"}
"""

from typing import Optional, Dict

from fastapi import HTTPException, status


class ApiError(HTTPException):
    """Base class for errors raised by request handlers."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.status_code_default, detail=message, headers=headers)


class ValidationError(ApiError):
    """Missing or malformed fields, bad enum values, business-rule violations."""

    status_code_default = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ApiError):
    """Bad credentials or a missing/invalid token."""

    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(ApiError):
    """Authenticated, but not permitted to do this."""

    status_code_default = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    """Referenced entity is absent or outside the caller's scope."""

    status_code_default = status.HTTP_404_NOT_FOUND


class InternalError(ApiError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_envelope(message: str) -> dict:
    return {"success": False, "message": message}
