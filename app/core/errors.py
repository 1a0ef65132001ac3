"""
Error taxonomy shared by services and routes.

Each error is an HTTPException so FastAPI maps it to its status code; the
`code` attribute is a stable identifier returned alongside the message.
"""

from fastapi import HTTPException, status
from typing import Dict, Optional


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "SERVER"
    message = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=type(self).status_code, detail=message or self.message, headers=headers)
        if code:
            self.code = code


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION"
    message = "Invalid request"


class WeakPassword(ValidationError):
    code = "WEAK_PASSWORD"
    message = "Password must be at least 6 characters"


class InvalidAssignee(ValidationError):
    code = "INVALID_ASSIGNEE"
    message = "Tasks must be assigned to one or more existing users"


class DuplicateResource(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "DUPLICATE"
    message = "Resource already exists"


class DuplicateEmail(DuplicateResource):
    code = "DUP_EMAIL"
    message = "Email already registered"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    message = "Access denied"


class InvalidInvite(Forbidden):
    code = "BAD_INVITE"
    message = "Invalid admin invite token"


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "UNAUTHORIZED"
    message = "Not authorized, token failed"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message, code, headers={"WWW-Authenticate": "Bearer"})


class InvalidCredentials(Unauthorized):
    code = "BAD_CREDENTIALS"
    message = "Invalid email or password"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    message = "Not found"


class ServerError(AppError):
    pass
