from app.core.models.daily_record import DailyRecord
from app.core.models.parent_student_relationship import ParentStudentRelationship
from app.core.models.school_class import SchoolClass, student_classes

__all__ = [
    "DailyRecord",
    "ParentStudentRelationship",
    "SchoolClass",
    "student_classes",
]
