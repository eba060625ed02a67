import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Optional overrides for running the suite against a real database
env_test_path = os.path.join(os.path.dirname(__file__), ".env.test")
if os.path.exists(env_test_path):
    load_dotenv(env_test_path, override=True)

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from libs.common.config import get_settings  # noqa: E402

# Clear cached settings to reload with the test env vars
get_settings.cache_clear()
settings = get_settings()

from libs.db.base import Base  # noqa: E402
from libs.db.config import enable_sqlite_savepoints  # noqa: E402
from services.store_service import models as _store_models  # noqa: E402, F401
from services.store_service.app.main import app  # noqa: E402


@pytest_asyncio.fixture
async def test_engine():
    """
    A fresh schema per test. SQLite runs in memory on a single shared
    connection; other backends get their tables dropped afterwards.
    """
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_savepoints(engine)
    else:
        engine = create_async_engine(settings.DATABASE_URL, future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session that rolls back after the test.
    join_transaction_mode="create_savepoint" lets code under test commit and
    roll back freely while the outer transaction is discarded at the end.
    """
    connection = await test_engine.connect()
    transaction = await connection.begin()

    session_factory = async_sessionmaker(
        bind=connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = session_factory()

    try:
        yield session
    finally:
        await session.close()
        await transaction.rollback()
        await connection.close()


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient over the store app with the DB session overridden and a
    default authenticated member.
    """
    from libs.auth.dependencies import get_current_user
    from libs.auth.models import AuthUser
    from libs.db.session import get_async_db

    app.dependency_overrides[get_async_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: AuthUser(
        user_id="test-user", email="shopper@nutricart.io", role="authenticated"
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """
    Bearer header for requests; auth itself is handled by dependency overrides.
    """
    return {"Authorization": "Bearer mock-token"}
