"""Dated attendance/grade observation of one student in one class, written by one teacher."""
from sqlalchemy import Boolean, Column, Date, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import relationship, validates

from app.core.enums import Role
from app.core.exceptions import EntityValidationError
from app.core.models.school_class import SchoolClass
from app.core.validation import check_not_future, require_owner, require_present, to_grade
from app.db.session import Base


class DailyRecord(Base):
    """Several records per (student, class, date) are allowed, e.g. one per period."""

    __tablename__ = "daily_records"
    __table_args__ = (
        Index("idx_dailyrecord_student_date", "student_user_id", "record_date"),
        Index("idx_dailyrecord_class_date", "class_id", "record_date"),
        Index("idx_dailyrecord_teacher_date", "teacher_user_id", "record_date"),
    )
    # Owned by student, class and teacher: detaching from any of them makes the record an orphan.
    __mapper_args__ = {"legacy_is_orphan": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    record_date = Column(Date, nullable=False)
    is_present = Column(Boolean, nullable=False)
    grade = Column(Numeric(4, 2), nullable=True)
    description = Column(Text, nullable=True)
    student_user_id = Column(Integer, ForeignKey("students.user_id", ondelete="CASCADE"), nullable=False)
    class_id = Column(Integer, ForeignKey("school_classes.id", ondelete="CASCADE"), nullable=False)
    teacher_user_id = Column(Integer, ForeignKey("teachers.user_id", ondelete="CASCADE"), nullable=False)

    student = relationship("StudentProfile", back_populates="daily_records")
    school_class = relationship("SchoolClass", back_populates="daily_records")
    teacher = relationship("TeacherProfile", back_populates="daily_records")

    def __init__(self, record_date, is_present, student, school_class, teacher, grade=None, description=None) -> None:
        require_present(record_date, "record_date")
        require_present(is_present, "is_present")
        student = require_owner(self, "student", student, Role.STUDENT)
        require_present(school_class, "school_class")
        if not isinstance(school_class, SchoolClass):
            raise EntityValidationError("school_class must be a SchoolClass")
        teacher = require_owner(self, "teacher", teacher, Role.TEACHER)
        grade = to_grade(grade, "grade")
        self.record_date = record_date
        self.is_present = is_present
        self.grade = grade
        self.description = description
        self.student = student
        self.school_class = school_class
        self.teacher = teacher

    @validates("record_date")
    def _validate_record_date(self, key: str, value):
        return check_not_future(value, key)

    @validates("grade")
    def _validate_grade(self, key: str, value):
        return to_grade(value, key)

    def __repr__(self) -> str:
        return f"<DailyRecord id={self.id} date={self.record_date} present={self.is_present} grade={self.grade}>"
