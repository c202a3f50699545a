"""
FastAPI dependencies for user-management authorization.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status

from app.features.permissions.roles import can_access_module
from app.features.permissions.service import UserManagementService
from app.features.users.auth import PasswordHasher
from app.features.users.dependencies import get_current_user, get_password_hasher, get_user_store
from app.features.users.models import User
from app.features.users.store import UserStore
from app.utils import get_logger


log = get_logger(__name__)


def get_user_management_service(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)]
) -> UserManagementService:
    return UserManagementService(store, hasher)


def require_module(module: str):
    """
    FastAPI dependency to require access to an application module.

    Usage:
        router = APIRouter(dependencies=[Depends(require_module("payroll"))])

    Args:
        module: Module name, e.g. "candidates", "payroll", "reports"

    Returns:
        Dependency function that returns the current user if their role reaches the module

    Raises:
        HTTPException: 403 if the role cannot reach the module
    """
    async def module_dependency(
        current_user: Annotated[User, Depends(get_current_user)]
    ) -> User:
        if not can_access_module(current_user.role, module):
            log.debug(f"User {current_user.id} ({current_user.role}) denied module {module}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: module {module}"
            )
        return current_user

    return module_dependency
