"""
Role-based authorization decisions for user management.

Every role maps to a fixed PermissionSet. The table is built once at import
time and exposed read-only; there are no per-user overrides. Roles that are
unknown, empty or None resolve to the deny-all set rather than raising,
because accounts that have not finished onboarding may carry no role yet.
"""
import secrets
import string
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Role(str, Enum):
    """
    Closed set of account roles.

    Attributes:
        ADMIN: Full access to every module and every account
        HR: Human resources; manages employees and candidates
        RECRUITER: Works candidates and applications, manages no accounts
        MANAGER: Supervises a team, read-only on employees
        EMPLOYEE: Standard staff account
        CANDIDATE: Applicant account
    """

    ADMIN = "admin"
    HR = "hr"
    RECRUITER = "recruiter"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    CANDIDATE = "candidate"


ALL_ROLES: frozenset[Role] = frozenset(Role)

# Module wildcard: the role reaches every module
ALL_MODULES = "*"


@dataclass(frozen=True)
class PermissionSet:
    """Capabilities derived from a single role."""
    can_create_users: bool = False
    can_manage_roles: frozenset[Role] = frozenset()
    can_view_users: frozenset[Role] = frozenset()
    can_edit_users: frozenset[Role] = frozenset()
    can_delete_users: bool = False
    accessible_modules: frozenset[str] = frozenset()

    @property
    def has_all_modules(self) -> bool:
        return ALL_MODULES in self.accessible_modules

    def as_dict(self) -> dict[str, Any]:
        """Sorted, JSON-friendly view used by the API."""
        return {
            "can_create_users": self.can_create_users,
            "can_manage_roles": sorted(r.value for r in self.can_manage_roles),
            "can_view_users": sorted(r.value for r in self.can_view_users),
            "can_edit_users": sorted(r.value for r in self.can_edit_users),
            "can_delete_users": self.can_delete_users,
            "accessible_modules": sorted(self.accessible_modules),
        }


NO_PERMISSIONS = PermissionSet()

ROLE_PERMISSIONS: Mapping[Role, PermissionSet] = MappingProxyType({
    Role.ADMIN: PermissionSet(
        can_create_users=True,
        can_manage_roles=ALL_ROLES,
        can_view_users=ALL_ROLES,
        can_edit_users=ALL_ROLES,
        can_delete_users=True,
        accessible_modules=frozenset({ALL_MODULES}),
    ),
    Role.HR: PermissionSet(
        can_create_users=True,
        can_manage_roles=frozenset({Role.EMPLOYEE, Role.CANDIDATE}),
        can_view_users=frozenset({Role.HR, Role.RECRUITER, Role.EMPLOYEE, Role.CANDIDATE}),
        can_edit_users=frozenset({Role.EMPLOYEE, Role.CANDIDATE}),
        can_delete_users=False,
        accessible_modules=frozenset({
            "candidates", "applications", "employees", "payroll",
            "contracts", "onboarding", "performance",
        }),
    ),
    Role.RECRUITER: PermissionSet(
        can_view_users=frozenset({Role.CANDIDATE}),
        accessible_modules=frozenset({"candidates", "applications", "interviews", "scoring"}),
    ),
    Role.MANAGER: PermissionSet(
        can_view_users=frozenset({Role.EMPLOYEE}),
        accessible_modules=frozenset({"team", "performance", "reports"}),
    ),
    # employee and candidate fall through to NO_PERMISSIONS
})


def parse_role(value: Any) -> Optional[Role]:
    """Return the Role for a string (or Role), or None when it is not one of the six."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def get_permissions(role: Any) -> PermissionSet:
    """Permission set for a role; anything unrecognized gets NO_PERMISSIONS."""
    parsed = parse_role(role)
    if parsed is None:
        return NO_PERMISSIONS
    return ROLE_PERMISSIONS.get(parsed, NO_PERMISSIONS)


def is_self_action(target_id: Any, actor_id: Any) -> bool:
    """Accounts never act on themselves through the management interface."""
    return str(target_id) == str(actor_id)


def can_create_user_with_role(actor_role: Any, target_role: Any) -> bool:
    permissions = get_permissions(actor_role)
    target = parse_role(target_role)
    return permissions.can_create_users and target in permissions.can_manage_roles


def can_view_user(actor_role: Any, target_role: Any) -> bool:
    permissions = get_permissions(actor_role)
    if permissions.has_all_modules:
        return True
    return parse_role(target_role) in permissions.can_view_users


def can_edit_user(actor_role: Any, target_role: Any, target_id: Any, actor_id: Any) -> bool:
    if is_self_action(target_id, actor_id):
        return False
    return parse_role(target_role) in get_permissions(actor_role).can_edit_users


def can_delete_user(actor_role: Any, target_id: Any, actor_id: Any) -> bool:
    if is_self_action(target_id, actor_id):
        return False
    return get_permissions(actor_role).can_delete_users


def can_access_module(role: Any, module: str) -> bool:
    permissions = get_permissions(role)
    return permissions.has_all_modules or module in permissions.accessible_modules


# ============================================================================
# Role catalog
# ============================================================================

@dataclass(frozen=True)
class RoleDescriptor:
    role: Role
    label: str
    description: str


ROLE_CATALOG: tuple[RoleDescriptor, ...] = (
    RoleDescriptor(Role.ADMIN, "Super Administrator", "Full access to every feature"),
    RoleDescriptor(Role.HR, "Human Resources", "Employees, payroll and contracts"),
    RoleDescriptor(Role.RECRUITER, "Recruiter", "Applications and interviews"),
    RoleDescriptor(Role.MANAGER, "Manager", "Team supervision and reporting"),
    RoleDescriptor(Role.EMPLOYEE, "Employee", "Standard employee access"),
    RoleDescriptor(Role.CANDIDATE, "Candidate", "Applicant access for job applications"),
)


def get_available_roles(actor_role: Any) -> list[RoleDescriptor]:
    """
    Roles the actor may assign, in catalog order.

    Used to populate role pickers; create_user/update_user re-check on the
    server regardless.
    """
    manageable = get_permissions(actor_role).can_manage_roles
    return [descriptor for descriptor in ROLE_CATALOG if descriptor.role in manageable]


# ============================================================================
# Temporary passwords
# ============================================================================

PASSWORD_LENGTH = 12
PASSWORD_PUNCTUATION = "!@#$%^&*"
PASSWORD_CLASSES = (
    string.ascii_lowercase,
    string.ascii_uppercase,
    string.digits,
    PASSWORD_PUNCTUATION,
)
PASSWORD_ALPHABET = "".join(PASSWORD_CLASSES)

_random = secrets.SystemRandom()


def generate_temporary_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Human-facing default password for a newly created account.

    Contains at least one lowercase letter, uppercase letter, digit and
    punctuation character; the remaining positions are drawn uniformly from
    the combined alphabet and the result is shuffled.
    """
    if length < len(PASSWORD_CLASSES):
        raise ValueError(f"Password length must be at least {len(PASSWORD_CLASSES)}")

    chars = [_random.choice(charset) for charset in PASSWORD_CLASSES]
    chars.extend(_random.choice(PASSWORD_ALPHABET) for _ in range(length - len(chars)))
    _random.shuffle(chars)
    return "".join(chars)
