"""
FastAPI dependencies for authentication and role guards.
"""
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.permissions.roles import Role, parse_role
from app.features.users.auth import PasswordHasher, verify_jwt_token
from app.features.users.models import User
from app.features.users.store import UserStore
from app.utils import get_logger


log = get_logger(__name__)

security = HTTPBearer()


def get_user_store(db: Annotated[AsyncSession, Depends(get_db)]) -> UserStore:
    return UserStore(db)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    store: Annotated[UserStore, Depends(get_user_store)]
) -> User:
    """
    Resolve the bearer token to the acting user.

    This dependency:
    1. Extracts the JWT from the Authorization header
    2. Verifies signature and expiry
    3. Loads the user row; the stored role, not the token claim, is used

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    payload = verify_jwt_token(credentials.credentials)
    user_id = payload.get("sub")

    user = await store.find_by_id(user_id) if user_id else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


def require_roles(*roles: Role):
    """
    Dependency factory that only lets the listed roles through.

    Usage:
        @router.get("/users")
        async def list_users(
            actor: User = Depends(require_roles(Role.ADMIN, Role.HR))
        ):
            ...

    Raises:
        HTTPException: 403 if the actor's role is not listed
    """
    allowed = frozenset(roles)

    async def role_dependency(
        user: Annotated[User, Depends(get_current_user)]
    ) -> User:
        if parse_role(user.role) not in allowed:
            log.debug(f"User {user.id} with role {user.role!r} denied; requires one of {sorted(r.value for r in allowed)}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied",
            )
        return user

    return role_dependency


get_current_staff_manager = require_roles(Role.ADMIN, Role.HR)
get_current_admin_user = require_roles(Role.ADMIN)
