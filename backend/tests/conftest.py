"""
SkateSpots Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any skatespots import, so the
       settings singleton, the engine and the upload directory all point
       at a throwaway directory: SQLite (aiosqlite) for the store, a temp
       folder for uploads, a fake Nominatim host.

Fixture Hierarchy (all function-scoped):
    ├── db_tables:          fresh `spots` table per test
    ├── db_session:         AsyncSession on the test database
    ├── mock_db_session:    AsyncMock session for failure paths
    ├── test_client:        httpx AsyncClient bound to the ASGI app
    ├── sample_image_bytes: tiny JPEG payload
    └── temp_storage:       empty directory for FileService instances
"""

import os
import shutil
import tempfile
from unittest.mock import AsyncMock, MagicMock

_TEST_ROOT = tempfile.mkdtemp(prefix="skatespots_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.db"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["NOMINATIM_URL"] = "http://nominatim.test"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from skatespots.database import Base, async_session_factory, engine  # noqa: E402
from skatespots.models.spot import Spot  # noqa: E402,F401
from skatespots.services.file_service import file_service  # noqa: E402


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_tables():
    """Drops and recreates the schema so every test starts with no spots."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(db_tables):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    A mock async database session.

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
        await SpotStore(mock_db_session).find_all()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def upload_dir():
    """The upload directory the app itself writes to; emptied after the test."""
    yield file_service.upload_dir
    for entry in file_service.upload_dir.iterdir():
        if entry.is_file():
            entry.unlink()


@pytest.fixture
def sample_image_bytes():
    """Minimal JPEG: SOI marker + JFIF header + EOI marker."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(db_tables, upload_dir):
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    Usage:
        async def test_liveness(test_client):
            response = await test_client.get("/api/test")
            assert response.status_code == 200
    """
    from skatespots.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
