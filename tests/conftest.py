import os
import random

os.environ.setdefault("REQUEST_TIMEOUT_MS", "5000")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.pool import NullPool

from models.database import make_engine, make_session_maker, init_db, get_session
from models.models import Base
from services.picker import get_rng
from main import app


# Test database URL; a fresh SQLite file per test unless overridden
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")


@pytest.fixture(scope="function")
async def engine(tmp_path):
    url = TEST_DATABASE_URL or f"sqlite+aiosqlite:///{tmp_path / 'pr_reviewer_test.db'}"
    test_engine = make_engine(url, poolclass=NullPool)
    await init_db(test_engine)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_maker(engine):
    return make_session_maker(engine)


@pytest.fixture(scope="function")
async def session(session_maker):
    """Session for calling the services directly."""
    async with session_maker() as s:
        yield s


@pytest.fixture(scope="function")
def rng():
    return random.Random(1234)


@pytest.fixture(scope="function")
async def client(session_maker, rng):
    """Create a test client bound to the test database."""
    async def override_get_session():
        async with session_maker() as s:
            yield s

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_rng] = lambda: rng

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
