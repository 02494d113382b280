"""Service test fixtures — async DB, FastAPI test client and account helpers.

Invariants:
    - Every test gets a fresh in-memory SQLite database (schema from Base.metadata)
    - get_db dependency overridden to use the test DB session factory
    - db_manager patched so the readiness probe sees the test engine
    - bcrypt runs with minimum rounds in tests

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      the partial unique index still holds
    - Accounts are created through the real /auth endpoints so tokens are genuine
"""

from datetime import date, timedelta

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from taskmanager.api.dependencies import get_credential_store
from taskmanager.core.domain_types import Role
from taskmanager.db.base import Base
from taskmanager.infrastructure.database import get_db, DatabaseSessionManager
from taskmanager.infrastructure.security import BcryptCredentialStore
from taskmanager.models import User
import taskmanager.infrastructure.database as db_module
from taskmanager.main import app

PASSWORD = "Str0ng!Pass"

fast_credentials = BcryptCredentialStore(rounds=4)


def future(days: int = 30) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_store] = lambda: fast_credentials

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
def signup(client):
    """Register + login a USER; returns {"id", "username", "headers"}."""
    async def _signup(username: str, email: str | None = None) -> dict:
        email = email or f"{username}@example.com"
        res = await client.post("/auth/register", json={
            "username": username, "email": email, "password": PASSWORD,
        })
        assert res.status_code == 201, res.text
        res = await client.post("/auth/login", json={
            "identifier": username, "password": PASSWORD,
        })
        assert res.status_code == 200, res.text
        body = res.json()
        return {
            "id": body["user_id"],
            "username": username,
            "headers": {"Authorization": f"Bearer {body['access_token']}"},
        }
    return _signup


@pytest.fixture
async def admin(client, test_db):
    """An ADMIN account seeded directly (registration always creates USER)."""
    user = User(
        username="root_admin",
        email="admin@example.com",
        password_hash=fast_credentials.hash(PASSWORD),
        role=Role.ADMIN.value,
    )
    test_db.add(user)
    await test_db.commit()
    res = await client.post("/auth/login", json={
        "identifier": "root_admin", "password": PASSWORD,
    })
    assert res.status_code == 200, res.text
    return {
        "id": user.id,
        "username": "root_admin",
        "headers": {"Authorization": f"Bearer {res.json()['access_token']}"},
    }


@pytest.fixture
def make_project(client):
    async def _make(owner: dict, name: str = "Apollo", **overrides) -> dict:
        payload = {"name": name, "status": "ACTIVE", "start_date": future(1)}
        payload.update(overrides)
        res = await client.post("/projects", json=payload, headers=owner["headers"])
        assert res.status_code == 201, res.text
        return res.json()
    return _make


@pytest.fixture
def make_task(client):
    async def _make(owner: dict, project_id: int, name: str = "Design", **overrides) -> dict:
        payload = {"name": name, "status": "TODO", "due_date": future(10)}
        payload.update(overrides)
        res = await client.post(
            f"/projects/{project_id}/tasks", json=payload, headers=owner["headers"],
        )
        assert res.status_code == 201, res.text
        return res.json()
    return _make
