from typing import Any, Sequence

from sqlalchemy.orm import selectinload

from app.auth.models import StudentProfile, TeacherProfile
from app.core.models import DailyRecord, SchoolClass
from app.repositories.base import CrudRepository


class SchoolClassRepository(CrudRepository[SchoolClass]):
    model = SchoolClass

    def _load_options(self) -> Sequence[Any]:
        return (
            selectinload(SchoolClass.teacher).selectinload(TeacherProfile.user),
            selectinload(SchoolClass.students).selectinload(StudentProfile.user),
            selectinload(SchoolClass.daily_records),
        )


class DailyRecordRepository(CrudRepository[DailyRecord]):
    model = DailyRecord

    def _load_options(self) -> Sequence[Any]:
        return (
            selectinload(DailyRecord.student),
            selectinload(DailyRecord.school_class),
            selectinload(DailyRecord.teacher),
        )
