"""
Pytest configuration and fixtures.
"""
import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.engine import build_engine, get_db, init_db
from app.core.rate_limit import limiter
from app.features.permissions.roles import Role
from app.features.permissions.service import UserManagementService
from app.features.users.auth import PasswordHasher, create_access_token
from app.features.users.dependencies import get_password_hasher
from app.features.users.store import UserStore
from app.main import app as fastapi_app


DEFAULT_PASSWORD = "password123"


@pytest.fixture
async def engine(tmp_path):
    """Fresh SQLite database file per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def hasher():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def store(db):
    return UserStore(db)


@pytest.fixture
def service(store, hasher):
    return UserManagementService(store, hasher)


@pytest.fixture
def make_user(db, hasher):
    """Insert and commit a user directly, bypassing permission checks."""
    counter = {"n": 0}

    async def _make_user(role=Role.CANDIDATE, email=None, password=DEFAULT_PASSWORD, **fields):
        counter["n"] += 1
        role_value = role.value if isinstance(role, Role) else role
        user = await UserStore(db).insert({
            "email": email or f"{role_value or 'user'}{counter['n']}@example.com",
            "password_hash": await hasher.hash(password),
            "first_name": fields.pop("first_name", role_value.title() if role_value else "Test"),
            "last_name": fields.pop("last_name", f"User{counter['n']}"),
            "role": role_value,
            "profile_completed": role_value != Role.CANDIDATE.value,
            **fields,
        })
        await db.commit()
        return user

    return _make_user


@pytest.fixture
def app(session_factory, hasher):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_password_hasher] = lambda: hasher
    limiter.reset()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth_headers(user) -> dict:
    """Authorization header carrying a fresh token for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
