"""
Errors raised by user-management operations.

Each carries the HTTP status the API answers with; the mapping itself is
registered once in app.main.
"""
from fastapi import status


class UserManagementError(Exception):
    """Base class; ``message`` is safe to show to the end user."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PermissionDenied(UserManagementError):
    status_code = status.HTTP_403_FORBIDDEN


class DuplicateEmail(UserManagementError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, email: str):
        super().__init__("An account with this email already exists")
        self.email = email


class NotFound(UserManagementError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ValidationFailed(UserManagementError):
    status_code = status.HTTP_400_BAD_REQUEST
