"""
Seed script to create the first administrator account.

Only an admin can create another admin, so the first one has to be inserted
directly. Credentials come from the command line or from the environment
(ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_FIRST_NAME, ADMIN_LAST_NAME). When no
password is given a temporary one is generated and printed once.

Usage:
    uv run python -m scripts.seed_admin --email admin@example.com
"""
import argparse
import asyncio
import os

from app.core.database.engine import get_db, init_db
from app.features.permissions.exceptions import DuplicateEmail
from app.features.permissions.roles import Role, generate_temporary_password
from app.features.users.auth import BCRYPT_MAX_PASSWORD_BYTES, PasswordHasher, password_too_long
from app.features.users.store import UserStore
from app.utils import get_logger


log = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the initial admin account")
    parser.add_argument("--email", default=os.environ.get("ADMIN_EMAIL"))
    parser.add_argument("--password", default=os.environ.get("ADMIN_PASSWORD"))
    parser.add_argument("--first-name", default=os.environ.get("ADMIN_FIRST_NAME", "System"))
    parser.add_argument("--last-name", default=os.environ.get("ADMIN_LAST_NAME", "Administrator"))
    args = parser.parse_args(argv)
    if not args.email:
        parser.error("--email or ADMIN_EMAIL is required")
    if args.password and password_too_long(args.password):
        parser.error(f"--password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return args


async def seed_admin(store: UserStore, hasher: PasswordHasher, args: argparse.Namespace) -> bool:
    """Insert the admin row; False if the email is already taken."""
    existing = await store.find_by_email(args.email)
    if existing:
        log.info(f"User '{existing.email}' already exists with role {existing.role}, skipping")
        return False

    password = args.password
    if not password:
        password = generate_temporary_password()
        log.warning(f"Generated temporary password for {args.email}: {password}")

    try:
        user = await store.insert({
            "email": args.email,
            "password_hash": await hasher.hash(password),
            "first_name": args.first_name,
            "last_name": args.last_name,
            "role": Role.ADMIN.value,
            "profile_completed": True,
        })
    except DuplicateEmail:
        log.info(f"User '{args.email}' was created concurrently, skipping")
        return False

    log.info(f"Created admin {user.email} ({user.id})")
    return True


async def main(argv=None):
    """Create tables if needed, then the admin account."""
    args = parse_args(argv)
    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            await seed_admin(UserStore(db), PasswordHasher(), args)
            await db.commit()
        except Exception as e:
            log.error(f"Error seeding admin: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
