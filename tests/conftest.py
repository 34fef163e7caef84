"""Shared fixtures: an in-memory database, a user with an API key, an API client."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from adminkit.api.deps import get_db
from adminkit.main import app
from adminkit.models import Base, Import
from adminkit.models.database import enable_sqlite_savepoints
from adminkit.repositories.import_repo import ImportRepository
from adminkit.repositories.user_repo import UserRepository


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def user_and_key(session_maker):
    async with session_maker() as session:
        repo = UserRepository(session)
        user = await repo.create(email="owner@example.com", full_name="Owner")
        _, raw_key = await repo.create_api_key(user, name="tests")
        await session.commit()
    return user, raw_key


@pytest.fixture
def user(user_and_key):
    return user_and_key[0]


@pytest.fixture
def api_key(user_and_key) -> str:
    return user_and_key[1]


@pytest.fixture
def make_import(session_maker, user):
    """Create a committed import owned by ``user``."""

    async def _make_import(total_rows: int = 0, importer: str = "leads", **kwargs) -> Import:
        async with session_maker() as session:
            import_ = await ImportRepository(session).create(
                user_id=user.id,
                file_name=kwargs.pop("file_name", "contacts.csv"),
                importer=importer,
                total_rows=total_rows,
                **kwargs,
            )
            await session.commit()
        return import_

    return _make_import


@pytest.fixture
async def client(session_maker, api_key):
    async def _get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-API-Key": api_key},
    ) as client:
        yield client

    app.dependency_overrides.clear()
