from typing import Any, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from app.auth.models import ParentProfile, StudentProfile, TeacherProfile, User
from app.core.enums import Role
from app.core.exceptions import EntityValidationError, ReferentialIntegrityError
from app.core.models import ParentStudentRelationship, SchoolClass
from app.repositories.base import CrudRepository


class UserRepository(CrudRepository[User]):
    """Users of every role."""

    model = User

    async def find_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(self._select().where(User.username == username))
        return result.scalar_one_or_none()


class _RoleRepository(UserRepository):
    """Users restricted to a single role tag."""

    role: Role

    def _criteria(self) -> Sequence[Any]:
        return (User.role == self.role,)

    def _check_role(self, entity: User) -> None:
        if entity.role != self.role:
            raise EntityValidationError(f"Expected a {self.role.value} user, got {entity.role}")

    async def save(self, entity: User) -> User:
        self._check_role(entity)
        return await super().save(entity)

    async def delete(self, entity: User) -> None:
        self._check_role(entity)
        await super().delete(entity)


class AdminRepository(_RoleRepository):
    role = Role.ADMIN


class TeacherRepository(_RoleRepository):
    role = Role.TEACHER

    def _load_options(self) -> Sequence[Any]:
        return (
            selectinload(User.teacher_profile).selectinload(TeacherProfile.taught_classes),
            selectinload(User.teacher_profile).selectinload(TeacherProfile.daily_records),
        )

    async def delete(self, entity: User) -> None:
        """Refuse while the teacher still has classes: classes are never deleted with their teacher."""
        self._check_role(entity)
        taught = await self.db.scalar(
            select(func.count(SchoolClass.id)).where(SchoolClass.teacher_id == entity.id)
        )
        if taught:
            raise ReferentialIntegrityError(
                f"Teacher {entity.username} still teaches {taught} class(es); reassign them before deleting"
            )
        await super().delete(entity)


class StudentRepository(_RoleRepository):
    role = Role.STUDENT

    def _load_options(self) -> Sequence[Any]:
        return (
            selectinload(User.student_profile).selectinload(StudentProfile.enrolled_classes),
            selectinload(User.student_profile)
            .selectinload(StudentProfile.parent_relationships)
            .selectinload(ParentStudentRelationship.parent),
            selectinload(User.student_profile).selectinload(StudentProfile.daily_records),
        )


class ParentRepository(_RoleRepository):
    role = Role.PARENT

    def _load_options(self) -> Sequence[Any]:
        return (
            selectinload(User.parent_profile)
            .selectinload(ParentProfile.parent_student_relationships)
            .selectinload(ParentStudentRelationship.student),
        )
