"""
SQL-backed user store.

Thin async wrapper over an AsyncSession. It flushes but never commits; the
request-scoped session from get_db commits once the route has finished.
"""
from typing import Any, Optional, Sequence
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.permissions.exceptions import DuplicateEmail
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserStore:
    """Persistence boundary for User rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def insert(self, fields: dict[str, Any]) -> User:
        """
        Insert a user row.

        Raises:
            DuplicateEmail: the unique constraint on email rejected the row
        """
        fields = dict(fields)
        fields["email"] = normalize_email(fields["email"])
        user = User(**fields)
        self.db.add(user)
        await self._flush(fields["email"])
        await self.db.refresh(user)
        return user

    async def update(self, user_id: str, patch: dict[str, Any]) -> Optional[User]:
        """
        Apply ``patch`` to the row; None if the user does not exist.

        None values for NOT NULL columns are skipped.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            return None

        columns = User.__table__.columns
        for key, value in patch.items():
            if value is None and not columns[key].nullable:
                continue
            if key == "email":
                value = normalize_email(value)
            setattr(user, key, value)

        await self._flush(user.email)
        await self.db.refresh(user)
        return user

    async def delete(self, user_id: str) -> bool:
        result = await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.flush()
        return result.rowcount > 0

    async def list_all(self) -> Sequence[User]:
        result = await self.db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
        return result.scalars().all()

    async def list_by_role(self, *roles: str) -> Sequence[User]:
        result = await self.db.execute(
            select(User)
            .where(User.role.in_([getattr(role, "value", role) for role in roles]))
            .order_by(User.created_at.desc(), User.id.desc())
        )
        return result.scalars().all()

    async def _flush(self, email: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if "email" in str(e.orig).lower():
                log.info("Rejected duplicate email %s", email)
                raise DuplicateEmail(email) from e
            log.error("User store integrity error", exc_info=True)
            raise
