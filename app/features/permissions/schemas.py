"""
Pydantic schemas for permission and role responses.
"""
from typing import List
from pydantic import BaseModel, Field

from app.features.permissions.roles import PermissionSet, Role, RoleDescriptor


class PermissionSetResponse(BaseModel):
    """Capabilities of a role, as lists sorted for stable output."""
    role: str
    can_create_users: bool
    can_manage_roles: List[str] = Field(default_factory=list)
    can_view_users: List[str] = Field(default_factory=list)
    can_edit_users: List[str] = Field(default_factory=list)
    can_delete_users: bool
    accessible_modules: List[str] = Field(default_factory=list, description='"*" means every module')

    @classmethod
    def build(cls, role: str, permissions: PermissionSet) -> "PermissionSetResponse":
        return cls(role=role, **permissions.as_dict())


class RoleDescriptorResponse(BaseModel):
    """Entry of the role catalog used by role pickers."""
    role: Role
    label: str
    description: str

    @classmethod
    def build(cls, descriptor: RoleDescriptor) -> "RoleDescriptorResponse":
        return cls(role=descriptor.role, label=descriptor.label, description=descriptor.description)


class ModuleAccessResponse(BaseModel):
    module: str
    accessible: bool
