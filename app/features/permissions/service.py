"""
User-management operations guarded by the role table.

Every mutating call checks the actor against app.features.permissions.roles
first and then performs exactly one store operation. Nothing here commits;
the request-scoped session does.
"""
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence

from app.features.permissions.exceptions import DuplicateEmail, NotFound, PermissionDenied, ValidationFailed
from app.features.permissions.roles import (
    Role,
    can_create_user_with_role,
    can_delete_user,
    can_edit_user,
    can_view_user,
    get_permissions,
    is_self_action,
    parse_role,
)
from app.features.users.auth import PasswordHasher
from app.features.users.models import User
from app.features.users.store import UserStore, normalize_email
from app.utils import get_logger


log = get_logger(__name__)


class Actor(Protocol):
    """Authenticated caller; a User row satisfies this."""
    id: str
    role: str


@dataclass
class NewUserData:
    email: str
    password: str
    first_name: str
    last_name: str
    role: Role | str
    phone: Optional[str] = None
    department: Optional[str] = None


class UserManagementService:
    """
    Create, update, delete and list accounts on behalf of an actor.

    Args:
        store: UserStore bound to the current session
        hasher: PasswordHasher used for new and changed passwords
    """

    def __init__(self, store: UserStore, hasher: PasswordHasher):
        self.store = store
        self.hasher = hasher

    async def create_user(self, actor: Actor, data: NewUserData) -> User:
        """
        Raises:
            PermissionDenied: actor may not create accounts with this role
            DuplicateEmail: email already registered
        """
        target_role = parse_role(data.role)
        if target_role is None:
            raise ValidationFailed(f"Unknown role {data.role!r}")

        if not can_create_user_with_role(actor.role, target_role):
            log.info(f"User {actor.id} ({actor.role}) denied creating a {target_role.value} account")
            raise PermissionDenied(
                f"You do not have permission to create a user with the role {target_role.value}"
            )

        # Pre-check for a friendly error; the unique index on email is what
        # actually prevents duplicates under concurrent creates.
        if await self.store.find_by_email(data.email) is not None:
            raise DuplicateEmail(data.email)

        password_hash = await self.hasher.hash(data.password)

        user = await self.store.insert({
            "email": data.email,
            "password_hash": password_hash,
            "first_name": data.first_name,
            "last_name": data.last_name,
            "phone": data.phone,
            "department": data.department,
            "role": target_role.value,
            "profile_completed": target_role is not Role.CANDIDATE,
        })
        log.info(f"User {actor.id} created user {user.id} with role {user.role}")
        return user

    async def update_user(self, actor: Actor, target_id: str, patch: dict[str, Any]) -> User:
        """
        Apply a partial update to another account.

        A role change needs the same privilege as creating an account with
        the new role.

        Raises:
            NotFound: no such user
            PermissionDenied: actor may not edit the target or assign the role
            DuplicateEmail: the new email belongs to another account
        """
        target = await self.store.find_by_id(target_id)
        if target is None:
            raise NotFound()

        current_role = target.role or Role.CANDIDATE.value
        if not can_edit_user(actor.role, current_role, target.id, actor.id):
            log.info(f"User {actor.id} ({actor.role}) denied editing user {target.id} ({current_role})")
            raise PermissionDenied("You do not have permission to modify this user")

        patch = {key: value for key, value in patch.items() if key != "password_hash"}

        new_role = patch.get("role")
        if new_role is not None:
            parsed = parse_role(new_role)
            if parsed is None:
                raise ValidationFailed(f"Unknown role {new_role!r}")
            if parsed.value != current_role and not can_create_user_with_role(actor.role, parsed):
                log.info(f"User {actor.id} ({actor.role}) denied assigning role {parsed.value}")
                raise PermissionDenied(f"You do not have permission to assign the role {parsed.value}")
            patch["role"] = parsed.value
        else:
            patch.pop("role", None)

        password = patch.pop("password", None)
        if password:
            patch["password_hash"] = await self.hasher.hash(password)

        if patch.get("email") and normalize_email(patch["email"]) != target.email:
            existing = await self.store.find_by_email(patch["email"])
            if existing is not None and existing.id != target.id:
                raise DuplicateEmail(patch["email"])

        updated = await self.store.update(target.id, patch)
        if updated is None:
            raise NotFound()

        log.info(f"User {actor.id} updated user {target.id} fields={sorted(patch)}")
        return updated

    async def delete_user(self, actor: Actor, target_id: str) -> None:
        """
        Permanently delete an account.

        Raises:
            PermissionDenied: actor may not delete accounts, or targets itself
            NotFound: no such user
        """
        if not can_delete_user(actor.role, target_id, actor.id):
            log.info(f"User {actor.id} ({actor.role}) denied deleting user {target_id}")
            raise PermissionDenied("You do not have permission to delete this user")

        if not await self.store.delete(target_id):
            raise NotFound()

        log.info(f"User {actor.id} deleted user {target_id}")

    async def get_accessible_users(self, actor: Actor, role: Optional[Role | str] = None) -> Sequence[User]:
        """Users the actor may see, newest first, optionally narrowed to one role."""
        permissions = get_permissions(actor.role)

        if role is not None:
            parsed = parse_role(role)
            if parsed is None or not can_view_user(actor.role, parsed):
                return []
            return await self.store.list_by_role(parsed)

        if permissions.has_all_modules:
            return await self.store.list_all()

        if not permissions.can_view_users:
            return []
        return await self.store.list_by_role(*permissions.can_view_users)

    async def get_user(self, actor: Actor, target_id: str) -> User:
        """
        Fetch one account if the actor may see it.

        Raises:
            NotFound: no such user, or not visible to the actor
        """
        user = await self.store.find_by_id(target_id)
        if user is None:
            raise NotFound()
        if is_self_action(user.id, actor.id) or can_view_user(actor.role, user.role or Role.CANDIDATE):
            return user
        raise NotFound()
