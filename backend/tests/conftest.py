"""
SchoolMap Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets its own file-backed SQLite database (aiosqlite) with
       the schema created from the ORM metadata. Endpoint tests talk to the
       app through httpx's ASGITransport with get_db_session overridden to
       use that database.

Fixture Hierarchy:
    db_engine ── session_factory ─┬─ db_session ── school, department, user, keywords
                                  └─ test_client
    mock_db_session, neis_payload, static_root
"""

import os
import tempfile

# Settings are read at import time: configure the environment first
_TEST_DIR = tempfile.mkdtemp(prefix="schoolmap_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/app.db"
os.environ["NEIS_API_KEY"] = "test-key-not-real"
os.environ["STATIC_ROOT"] = os.path.join(_TEST_DIR, "public")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from pathlib import Path  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

import app.models  # noqa: E402,F401
from app.config import settings  # noqa: E402
from app.database import Base, get_db_session  # noqa: E402
from app.schemas.user import UserRegister  # noqa: E402
from app.services.keyword_service import keyword_service  # noqa: E402
from app.services.school_service import department_service, school_service  # noqa: E402
from app.services.user_service import user_service  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture
def user_password():
    return TEST_PASSWORD


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'schoolmap.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    AsyncMock standing in for AsyncSession, for tests that only check which
    calls a service makes.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Seed data
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def school(db_session):
    created, _ = await school_service.register_school(db_session, "Seoul High", "B10-7010123")
    return created


@pytest_asyncio.fixture
async def department(db_session, school):
    created, _ = await department_service.add_department(db_session, school.id, "Science")
    return created


@pytest_asyncio.fixture
async def user(db_session, school):
    user_id = await user_service.register_user(
        db_session,
        UserRegister(idname="minji", password=TEST_PASSWORD, name="Kim Minji", school_id=school.id),
    )
    return await user_service.get_user_by_id(db_session, user_id)


@pytest_asyncio.fixture
async def keywords(db_session):
    """Three keywords: music, soccer, coding (in id order)."""
    result = []
    for word in ("music", "soccer", "coding"):
        keyword, _ = await keyword_service.add_keyword(db_session, word)
        result.append(keyword)
    return result


# ══════════════════════════════════════════════════════════════════════════
# NEIS payloads
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def neis_payload():
    """Builds a NEIS-shaped success payload for a service and its rows."""

    def build(service: str, rows: list) -> dict:
        return {
            service: [
                {
                    "head": [
                        {"list_total_count": len(rows)},
                        {"RESULT": {"CODE": "INFO-000", "MESSAGE": "정상 처리되었습니다."}},
                    ]
                },
                {"row": rows},
            ]
        }

    return build


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def static_root():
    root = Path(settings.static_root)
    root.mkdir(parents=True, exist_ok=True)
    (root / "index.html").write_text("<h1>SchoolMap</h1>", encoding="utf-8")
    (root / "app.js").write_text("console.log('schoolmap');", encoding="utf-8")
    return root


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    httpx AsyncClient bound to the app, with request sessions drawn from
    the per-test database.
    """
    from app.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
