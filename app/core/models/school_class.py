"""Teaching unit: one teacher, many enrolled students, many daily records."""
from sqlalchemy import Column, ForeignKey, Index, Integer, String, Table
from sqlalchemy.orm import relationship, validates

from app.core.enums import Role
from app.core.exceptions import EntityValidationError
from app.core.validation import check_max_length, require_owner, require_text
from app.db.session import Base


# Enrollment join table, no extra columns.
student_classes = Table(
    "student_classes",
    Base.metadata,
    Column("student_user_id", Integer, ForeignKey("students.user_id", ondelete="CASCADE"), primary_key=True),
    Column("class_id", Integer, ForeignKey("school_classes.id", ondelete="CASCADE"), primary_key=True),
)


class SchoolClass(Base):
    """Capacity is informational; enrollment beyond it is not refused."""

    __tablename__ = "school_classes"
    __table_args__ = (
        Index("idx_schoolclass_name", "name"),
        Index("idx_schoolclass_teacher_id", "teacher_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    capacity = Column(Integer, nullable=True)
    teacher_id = Column(Integer, ForeignKey("teachers.user_id", ondelete="RESTRICT"), nullable=False)

    teacher = relationship("TeacherProfile", back_populates="taught_classes")
    students = relationship("StudentProfile", secondary=student_classes, back_populates="enrolled_classes")
    daily_records = relationship("DailyRecord", back_populates="school_class", cascade="all, delete-orphan")

    def __init__(self, name: str, teacher, capacity=None) -> None:
        require_text(name, "name")
        teacher = require_owner(self, "teacher", teacher, Role.TEACHER)
        self.name = name
        self.capacity = capacity
        self.teacher = teacher

    @validates("name")
    def _validate_name(self, key: str, value: str) -> str:
        return check_max_length(value, key, 100)

    @validates("capacity")
    def _validate_capacity(self, key: str, value):
        if value is not None and value < 0:
            raise EntityValidationError("capacity cannot be negative")
        return value

    def add_student(self, student) -> None:
        """Enroll a student profile or student user; enrolled_classes follows through the back reference."""
        if student is None:
            return
        student = require_owner(self, "students", student, Role.STUDENT)
        if student not in self.students:
            self.students.append(student)

    def remove_student(self, student) -> None:
        if student is None:
            return
        student = require_owner(self, "students", student, Role.STUDENT)
        if student in self.students:
            self.students.remove(student)

    def add_daily_record(self, record) -> None:
        if record not in self.daily_records:
            self.daily_records.append(record)

    def remove_daily_record(self, record) -> None:
        # The detached record is an orphan and is deleted at flush.
        if record in self.daily_records:
            self.daily_records.remove(record)

    def __repr__(self) -> str:
        return f"<SchoolClass id={self.id} name={self.name!r} capacity={self.capacity}>"
