"""
User feature routes: login, self-service profile and user management.
"""
from datetime import datetime, timezone
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.core import config
from app.core.rate_limit import limiter
from app.features.permissions.dependencies import get_user_management_service
from app.features.permissions.roles import Role, generate_temporary_password, get_available_roles, get_permissions
from app.features.permissions.schemas import PermissionSetResponse, RoleDescriptorResponse
from app.features.permissions.service import NewUserData, UserManagementService
from app.features.users.auth import PasswordHasher, create_access_token
from app.features.users.dependencies import (
    get_current_admin_user,
    get_current_staff_manager,
    get_current_user,
    get_password_hasher,
    get_user_store,
)
from app.features.users.models import User
from app.features.users.schemas import (
    LoginRequest,
    ProfileComplete,
    ProfileFields,
    TemporaryPasswordResponse,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from app.features.users.store import UserStore
from app.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["users"])
auth_router = APIRouter(tags=["auth"])


# ============================================================================
# Authentication
# ============================================================================

@auth_router.post("/login", response_model=TokenResponse)
@limiter.limit(config.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    credentials: LoginRequest,
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)]
):
    """Exchange email and password for a bearer token."""
    user = await store.find_by_email(credentials.email)

    if user is None or not await hasher.verify(credentials.password, user.password_hash):
        log.info("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is deactivated",
        )

    user = await store.update(user.id, {"last_login_at": datetime.now(timezone.utc)})
    token = create_access_token(user.id, user.role)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


# ============================================================================
# Current user
# ============================================================================

@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(get_current_user)]
):
    """Get current authenticated user's profile."""
    return user


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    update_data: ProfileFields,
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)]
):
    """Update current user's own profile fields."""
    return await store.update(user.id, update_data.model_dump(exclude_unset=True))


@router.put("/me/complete", response_model=UserResponse)
async def complete_current_user_profile(
    profile: ProfileComplete,
    user: Annotated[User, Depends(get_current_user)],
    store: Annotated[UserStore, Depends(get_user_store)]
):
    """Submit the profile-completion form and mark the profile complete."""
    patch = profile.model_dump(exclude_unset=True)
    patch["profile_completed"] = True
    log.info(f"User {user.id} completed their profile")
    return await store.update(user.id, patch)


@router.get("/me/permissions", response_model=PermissionSetResponse)
async def get_current_user_permissions(
    user: Annotated[User, Depends(get_current_user)]
):
    """Permission set derived from the current user's role."""
    return PermissionSetResponse.build(user.role, get_permissions(user.role))


# ============================================================================
# User management
# ============================================================================

@router.get("/available-roles", response_model=List[RoleDescriptorResponse])
async def list_available_roles(
    user: Annotated[User, Depends(get_current_user)]
):
    """Roles the current user may assign when creating or editing accounts."""
    return [RoleDescriptorResponse.build(descriptor) for descriptor in get_available_roles(user.role)]


@router.get("/temporary-password", response_model=TemporaryPasswordResponse)
async def get_temporary_password(
    actor: Annotated[User, Depends(get_current_staff_manager)]
):
    """Suggest a temporary password for a new account."""
    return TemporaryPasswordResponse(password=generate_temporary_password())


@router.get("/", response_model=List[UserResponse])
async def list_users(
    actor: Annotated[User, Depends(get_current_staff_manager)],
    service: Annotated[UserManagementService, Depends(get_user_management_service)],
    role: Optional[Role] = None
):
    """Users visible to the current user, newest first."""
    return await service.get_accessible_users(actor, role)


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    actor: Annotated[User, Depends(get_current_staff_manager)],
    service: Annotated[UserManagementService, Depends(get_user_management_service)]
):
    """Create an account with a role the current user may assign."""
    return await service.create_user(actor, NewUserData(**user_data.model_dump()))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(
    user_id: str,
    actor: Annotated[User, Depends(get_current_staff_manager)],
    service: Annotated[UserManagementService, Depends(get_user_management_service)]
):
    """Get a user the current user may view."""
    return await service.get_user(actor, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    actor: Annotated[User, Depends(get_current_staff_manager)],
    service: Annotated[UserManagementService, Depends(get_user_management_service)]
):
    """Update another user's record."""
    return await service.update_user(actor, user_id, update_data.model_dump(exclude_unset=True))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    admin: Annotated[User, Depends(get_current_admin_user)],
    service: Annotated[UserManagementService, Depends(get_user_management_service)]
):
    """Permanently delete a user (admin only)."""
    await service.delete_user(admin, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
