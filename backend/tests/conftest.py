"""
BugLab Backend — Test Configuration (conftest.py)
==================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test that touches the database gets its own SQLite file under
       tmp_path (aiosqlite, foreign keys on), so tests never share state.

Fixture Hierarchy (all function-scoped):
    db_engine ── session_factory ─┬─ profile_service / bug_service /
                                  │  assignment_service / identity_service /
                                  │  authenticator
                                  └─ count_rows
    app_settings + db_engine ── test_client (httpx AsyncClient over ASGI)
    mock_db_session (AsyncMock, no database)
"""

import os
import tempfile

# Must run before any buglab import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="buglab_test_"), "unused.db"
)
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["BCRYPT_ROUNDS"] = "4"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from buglab.config import Settings  # noqa: E402
from buglab.database import build_engine, create_session_factory, init_models  # noqa: E402
from buglab.services.assignment_service import AssignmentService  # noqa: E402
from buglab.services.bug_service import BugService  # noqa: E402
from buglab.services.credential_service import PasswordHasher  # noqa: E402
from buglab.services.identity_service import IdentityService  # noqa: E402
from buglab.services.profile_service import ProfileService  # noqa: E402
from buglab.services.session_service import SessionAuthenticator  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database with every table created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'buglab.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def count_rows(session_factory):
    """
    Count rows of a model, optionally filtered.

    Usage:
        assert await count_rows(ScientistBug, ScientistBug.bug_id == bug.id) == 0
    """

    async def _count(model, *criteria) -> int:
        async with session_factory() as db:
            query = select(func.count()).select_from(model)
            if criteria:
                query = query.where(*criteria)
            return (await db.execute(query)).scalar_one()

    return _count


@pytest.fixture
def mock_db_session():
    """
    An AsyncSession stand-in usable as `async with factory() as session`.

    Usage:
        factory = MagicMock(return_value=mock_db_session)
        async with transaction(factory) as db: ...
    """
    session = AsyncMock()
    session.__aenter__.return_value = session
    session.__aexit__.return_value = False
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Services
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def hasher():
    # bcrypt's minimum cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def identity_service(session_factory):
    return IdentityService(session_factory)


@pytest.fixture
def profile_service(session_factory, hasher):
    return ProfileService(session_factory, hasher, password_min_length=8)


@pytest.fixture
def bug_service(session_factory):
    return BugService(session_factory)


@pytest.fixture
def assignment_service(session_factory):
    return AssignmentService(session_factory)


@pytest.fixture
def authenticator(session_factory, hasher):
    return SessionAuthenticator(session_factory, hasher, max_age=3600)


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def app_settings():
    return Settings(
        environment="test",
        log_level="WARNING",
        bcrypt_rounds=4,
        session_cookie_name="buglab_session",
        session_cookie_secure=False,
        cors_origins="http://localhost:5173",
    )


@pytest_asyncio.fixture
async def test_client(app_settings, db_engine):
    """
    HTTPX AsyncClient talking to a fresh app over ASGI.

    The client keeps cookies between requests, so a login followed by
    GET /auth/me behaves like a browser session.
    """
    from buglab.main import create_app

    app = create_app(app_settings, engine=db_engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
