"""Pytest configuration: point the app at a throwaway SQLite file."""

import os
import tempfile

import anyio
import pytest

# Must run before clinicsite.config is imported; Settings reads the environment once.
_TEST_DIR = tempfile.mkdtemp(prefix="clinicsite-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_DIR, "uploads")
os.environ["ADMIN_PASSWORD"] = "test-password"
os.environ["ADMIN_PASSWORD_HASH"] = ""
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from fastapi.testclient import TestClient  # noqa: E402

from clinicsite.database import AsyncSessionLocal, Base, engine  # noqa: E402
from clinicsite import models  # noqa: E402,F401
from clinicsite.main import app  # noqa: E402

ADMIN_PASSWORD = "test-password"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db_session(anyio_backend):
    """Fresh schema and an open session for service-level tests."""
    await _reset_schema()
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def client():
    """Test client on a fresh database; startup seeds the default content."""
    anyio.run(_reset_schema)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client):
    response = client.post("/admin/login", data={"password": ADMIN_PASSWORD}, follow_redirects=False)
    assert response.status_code == 303
    return client


@pytest.fixture
def db_call():
    """Run `fn(session)` against the test database from synchronous route tests."""
    def _call(fn):
        async def _run():
            async with AsyncSessionLocal() as session:
                return await fn(session)
        return anyio.run(_run)
    return _call
