import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from app.auth.security import verify_password
from app.core.config import settings
from app.core.enums import Role
from app.core.exceptions import ServiceError
from app.db.schema_check import ensure_tables
from app.db.seed_admin import seed_admin
from app.db.session import Base
from app.repositories.users import AdminRepository, TeacherRepository


@pytest.mark.asyncio
async def test_ensure_tables_creates_only_missing_tables(tmp_path) -> None:
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'fresh.db'}")
    try:
        created = await ensure_tables(db_engine)
        assert set(created) == set(Base.metadata.tables)
        assert created.index("users") < created.index("teachers") < created.index("school_classes")

        assert await ensure_tables(db_engine) == []
    finally:
        await db_engine.dispose()


@pytest.mark.asyncio
async def test_seed_admin_creates_then_resets(db_session) -> None:
    admin = await seed_admin(db_session, "root", "first-password")
    assert admin.role == Role.ADMIN
    assert admin.admin_profile is not None
    assert verify_password("first-password", admin.password)

    again = await seed_admin(db_session, "root", "second-password")
    assert again is admin
    assert verify_password("second-password", again.password)
    assert await AdminRepository(db_session).count() == 1


@pytest.mark.asyncio
async def test_seed_admin_refuses_a_username_of_another_role(db_session, teacher) -> None:
    await TeacherRepository(db_session).save(teacher)
    with pytest.raises(ServiceError):
        await seed_admin(db_session, "teacher1", "first-password")


@pytest.mark.asyncio
async def test_seed_admin_without_credentials_is_skipped(db_session, monkeypatch) -> None:
    monkeypatch.setattr(settings, "seed_admin_username", None)
    monkeypatch.setattr(settings, "seed_admin_password", None)
    assert await seed_admin(db_session) is None
    assert await AdminRepository(db_session).count() == 0
