import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.main import app
from app.auth.accounts import new_parent, new_student, new_teacher
from app.auth.models import User
from app.db.session import Base, enable_sqlite_foreign_keys, get_db


@pytest.fixture()
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh file-backed SQLite database per test, so several sessions can see each other's commits."""
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'school.db'}", echo=False, future=True)
    enable_sqlite_foreign_keys(db_engine)
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async with session_factory() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# --- Entity builders ---


@pytest.fixture()
def teacher() -> User:
    return new_teacher("teacher1", "hash", "Ali", "Rezai", None, None, None, True, "E100", "Math")


@pytest.fixture()
def student() -> User:
    return new_student(
        "student1", "hash", "Sara", "Karimi", None, None, None, True,
        "S-001", "10", Decimal("17.50"), date(2010, 3, 1), None,
    )


@pytest.fixture()
def other_student() -> User:
    return new_student(
        "student2", "hash", "Reza", "Ahmadi", None, None, None, True,
        "S-002", "10", Decimal("15"), None, None,
    )


@pytest.fixture()
def parent() -> User:
    return new_parent("parent1", "hash", "Hassan", "Karimi", None, None, None, True, "Engineer", "Tehran")
