"""
Password hashing and access-token utilities.
"""
import jwt
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from starlette.concurrency import run_in_threadpool

from app.core import config
from app.features.permissions.exceptions import ValidationFailed


# bcrypt only looks at the first 72 bytes and recent releases reject longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


def password_too_long(plaintext: str) -> bool:
    return len(plaintext.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES


class PasswordHasher:
    """
    One-way salted password hashing with bcrypt.

    bcrypt is deliberately slow, so both operations run in the threadpool
    instead of on the event loop.
    """

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or config.BCRYPT_ROUNDS

    def _hash_sync(self, plaintext: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def _verify_sync(plaintext: str, digest: str) -> bool:
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except ValueError:
            # Malformed digest in the database
            return False

    async def hash(self, plaintext: str) -> str:
        if password_too_long(plaintext):
            raise ValidationFailed(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
        return await run_in_threadpool(self._hash_sync, plaintext)

    async def verify(self, plaintext: str, digest: str) -> bool:
        return await run_in_threadpool(self._verify_sync, plaintext, digest)


def create_access_token(user_id: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed access token for a user.

    Args:
        user_id: User ULID, stored in ``sub``
        role: Role at issue time; informational only, the database row wins
        expires_minutes: Override for ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    ttl = timedelta(minutes=expires_minutes if expires_minutes is not None else config.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "sub": user_id,
        "role": role,
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_jwt_token(token: str) -> dict:
    """
    Verify an access token and return its payload.

    Args:
        token: JWT token from Authorization header

    Returns:
        Decoded JWT payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )
