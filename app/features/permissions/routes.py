"""
Read-only routes over the role table.
"""
from typing import Annotated, List
from fastapi import APIRouter, Depends

from app.features.permissions.roles import ROLE_CATALOG, Role, can_access_module, get_permissions
from app.features.permissions.schemas import (
    ModuleAccessResponse,
    PermissionSetResponse,
    RoleDescriptorResponse,
)
from app.features.users.dependencies import get_current_admin_user, get_current_user
from app.features.users.models import User


router = APIRouter()


@router.get("/roles", response_model=List[RoleDescriptorResponse])
async def list_roles(
    current_user: Annotated[User, Depends(get_current_user)]
):
    """Full role catalog."""
    return [RoleDescriptorResponse.build(descriptor) for descriptor in ROLE_CATALOG]


@router.get("/roles/{role}", response_model=PermissionSetResponse)
async def get_role_permissions(
    role: Role,
    admin: Annotated[User, Depends(get_current_admin_user)]
):
    """Permission set of any role (admin only)."""
    return PermissionSetResponse.build(role.value, get_permissions(role))


@router.get("/modules/{module}", response_model=ModuleAccessResponse)
async def check_module_access(
    module: str,
    current_user: Annotated[User, Depends(get_current_user)]
):
    """Whether the current user's role reaches a module."""
    return ModuleAccessResponse(module=module, accessible=can_access_module(current_user.role, module))
