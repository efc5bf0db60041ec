"""Imports every mapped class so Base.metadata and the mapper registry are complete."""

from app.db.session import Base  # noqa: F401
from app.auth.models import (  # noqa: F401
    AdminProfile,
    ParentProfile,
    StudentProfile,
    TeacherProfile,
    User,
)
from app.core.models import (  # noqa: F401
    DailyRecord,
    ParentStudentRelationship,
    SchoolClass,
    student_classes,
)
