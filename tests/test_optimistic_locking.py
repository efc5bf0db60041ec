from decimal import Decimal

import pytest

from app.core.exceptions import ConcurrencyConflictError
from app.repositories.users import ParentRepository, StudentRepository, TeacherRepository


@pytest.mark.asyncio
async def test_every_update_bumps_the_version(db_session, teacher) -> None:
    repo = TeacherRepository(db_session)
    await repo.save(teacher)
    assert teacher.version == 1

    teacher.email = "ali.rezai@school.ir"
    await repo.save(teacher)
    assert teacher.version == 2

    teacher.enabled = False
    await repo.save(teacher)
    assert teacher.version == 3


@pytest.mark.asyncio
async def test_stale_writer_gets_a_conflict(session_factory, teacher) -> None:
    async with session_factory() as setup:
        await TeacherRepository(setup).save(teacher)

    async with session_factory() as first, session_factory() as second:
        repo_a = TeacherRepository(first)
        repo_b = TeacherRepository(second)
        copy_a = await repo_a.get(teacher.id)
        copy_b = await repo_b.get(teacher.id)
        assert copy_a.version == copy_b.version == 1

        copy_b.first_name = "Bahram"
        await repo_b.save(copy_b)
        assert copy_b.version == 2

        copy_a.first_name = "Arash"
        with pytest.raises(ConcurrencyConflictError) as exc:
            await repo_a.save(copy_a)
        assert exc.value.status_code == 409

        # The loser reloads, sees the winner's write and can retry on top of it.
        fresh = await repo_a.get(teacher.id)
        assert fresh.first_name == "Bahram"
        assert fresh.version == 2
        fresh.first_name = "Arash"
        await repo_a.save(fresh)
        assert fresh.version == 3


@pytest.mark.asyncio
async def test_stale_delete_gets_a_conflict(session_factory, parent) -> None:
    async with session_factory() as setup:
        await ParentRepository(setup).save(parent)

    async with session_factory() as first, session_factory() as second:
        copy_a = await ParentRepository(first).get(parent.id)
        copy_b = await ParentRepository(second).get(parent.id)

        copy_b.last_name = "Moradi"
        await ParentRepository(second).save(copy_b)

        with pytest.raises(ConcurrencyConflictError):
            await ParentRepository(first).delete(copy_a)
        assert await ParentRepository(second).exists(parent.id)


@pytest.mark.asyncio
async def test_profile_update_bumps_the_user_version(db_session, teacher) -> None:
    repo = TeacherRepository(db_session)
    await repo.save(teacher)

    teacher.teacher_profile.specialization = "Physics"
    await repo.save(teacher)
    assert teacher.version == 2


@pytest.mark.asyncio
async def test_stale_profile_writer_gets_a_conflict(session_factory, student) -> None:
    async with session_factory() as setup:
        await StudentRepository(setup).save(student)
    student_id = student.id

    async with session_factory() as first, session_factory() as second:
        copy_a = await StudentRepository(first).get(student_id)
        copy_b = await StudentRepository(second).get(student_id)

        copy_b.student_profile.last_average = Decimal("19")
        await StudentRepository(second).save(copy_b)
        assert copy_b.version == 2

        copy_a.student_profile.last_average = Decimal("5")
        with pytest.raises(ConcurrencyConflictError):
            await StudentRepository(first).save(copy_a)

    async with session_factory() as check:
        stored = await StudentRepository(check).get(student_id)
        assert stored.student_profile.last_average == Decimal("19")
        assert stored.version == 2
