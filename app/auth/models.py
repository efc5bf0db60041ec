"""Users and their role profiles.

A user is one row in ``users`` tagged with a role (``user_type``). The role
specific attributes live in a 1:1 profile row (``admins``, ``teachers``,
``students``, ``parents``) sharing the user's primary key. Build users through
the role constructors in ``app.auth.accounts``.
"""
from datetime import datetime, timezone
from typing import List, Optional, Union

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text, event
from sqlalchemy.orm import Session, relationship, validates

from app.auth.schemas import AccountCapabilities
from app.core.enums import AUTHORITY_PREFIX, Role
from app.core.exceptions import EntityValidationError
from app.core.models.parent_student_relationship import ParentStudentRelationship
from app.core.validation import check_max_length, check_past, to_grade
from app.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_PROFILE_ATTRIBUTES = {
    Role.ADMIN: "admin_profile",
    Role.TEACHER: "teacher_profile",
    Role.STUDENT: "student_profile",
    Role.PARENT: "parent_profile",
}


class User(Base):
    """Common identity record: credentials, contact data, role tag and audit columns."""

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_user_username", "username", unique=True),
        Index("idx_user_email", "email", unique=True),
        Index("idx_user_phonenumber", "phone_number", unique=True),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False)
    # bcrypt hash, never the plain password
    password = Column(String(255), nullable=False)
    role = Column("user_type", Enum(Role, name="user_type", native_enum=False, length=20), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone_number = Column(String(20), nullable=True)
    avatar_url = Column(String(512), nullable=True)
    enabled = Column(Boolean, nullable=False, default=True)
    # Optimistic lock: bumped on every UPDATE, a stale value makes the flush fail.
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    admin_profile = relationship(
        "AdminProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    teacher_profile = relationship(
        "TeacherProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    student_profile = relationship(
        "StudentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )
    parent_profile = relationship(
        "ParentProfile", back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin"
    )

    @validates("role")
    def _validate_role(self, key: str, value: Union[Role, str]) -> Role:
        role = Role(value)
        current = self.__dict__.get("role")
        if current is not None and current != role:
            raise EntityValidationError("The role of a user cannot be changed")
        return role

    @validates("first_name", "last_name")
    def _validate_name(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 100)

    @validates("email")
    def _validate_email(self, key: str, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        check_max_length(value, key, 255)
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise EntityValidationError(f"Invalid email address: {value}") from e
        return value

    @validates("phone_number")
    def _validate_phone_number(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 20)

    @validates("avatar_url")
    def _validate_avatar_url(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 512)

    @property
    def profile(self):
        """The role payload selected by the role tag."""
        if self.role is None:
            return None
        return getattr(self, _PROFILE_ATTRIBUTES[self.role])

    def authorities(self) -> List[str]:
        return [AUTHORITY_PREFIX + self.role.value]

    def capabilities(self) -> AccountCapabilities:
        return AccountCapabilities(enabled=bool(self.enabled), authorities=self.authorities())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, User):
            return NotImplemented
        # Unsaved users have no identity yet and equal nothing but themselves.
        return self.id is not None and self.role == other.role and self.id == other.id

    def __hash__(self) -> int:
        # Must not change when the id is assigned on insert.
        return hash((User, self.role))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role.value if self.role else None}>"


class AdminProfile(Base):
    """Admin payload. Carries no attributes of its own."""

    __tablename__ = "admins"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    user = relationship("User", back_populates="admin_profile")


class TeacherProfile(Base):
    __tablename__ = "teachers"
    __table_args__ = (Index("idx_teacher_employee_id", "employee_id", unique=True),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    employee_id = Column(String(50), nullable=True)
    specialization = Column(String(255), nullable=False)

    user = relationship("User", back_populates="teacher_profile")
    # Classes outlive their teacher: no delete cascade and the FK is ON DELETE RESTRICT.
    taught_classes = relationship(
        "SchoolClass", back_populates="teacher", cascade="save-update, merge", passive_deletes="all"
    )
    daily_records = relationship("DailyRecord", back_populates="teacher", cascade="all, delete-orphan")

    @validates("employee_id")
    def _validate_employee_id(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 50)

    @validates("specialization")
    def _validate_specialization(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 255)

    def add_school_class(self, school_class) -> None:
        # Assigning the teacher moves the class out of its previous teacher's list.
        school_class.teacher = self

    def remove_school_class(self, school_class) -> None:
        # school_classes.teacher_id is NOT NULL: the class must get a new teacher before the next flush.
        if school_class in self.taught_classes:
            self.taught_classes.remove(school_class)

    def add_daily_record(self, record) -> None:
        if record not in self.daily_records:
            self.daily_records.append(record)

    def remove_daily_record(self, record) -> None:
        if record in self.daily_records:
            self.daily_records.remove(record)


class StudentProfile(Base):
    __tablename__ = "students"
    __table_args__ = (Index("idx_student_student_code", "student_code", unique=True),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    student_code = Column(String(50), nullable=True)
    grade_level = Column(String(50), nullable=False)
    last_average = Column(Numeric(4, 2), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    description = Column(Text, nullable=True)

    user = relationship("User", back_populates="student_profile")
    parent_relationships = relationship(
        "ParentStudentRelationship", back_populates="student", cascade="all, delete-orphan"
    )
    enrolled_classes = relationship("SchoolClass", secondary="student_classes", back_populates="students")
    daily_records = relationship("DailyRecord", back_populates="student", cascade="all, delete-orphan")

    @validates("student_code", "grade_level")
    def _validate_codes(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 50)

    @validates("last_average")
    def _validate_last_average(self, key: str, value):
        return to_grade(value, key)

    @validates("date_of_birth")
    def _validate_date_of_birth(self, key: str, value):
        return check_past(value, key)

    def find_parent_relationship(self, parent: "ParentProfile") -> Optional[ParentStudentRelationship]:
        for rel in self.parent_relationships:
            if rel.parent is parent:
                return rel
        return None

    def add_parent_relationship(self, parent: "ParentProfile", relationship_type: str) -> ParentStudentRelationship:
        """Link a parent. A pair has at most one relationship; an existing one is returned unchanged."""
        existing = self.find_parent_relationship(parent)
        if existing is not None:
            return existing
        return ParentStudentRelationship(parent, self, relationship_type)

    def remove_parent_relationship(self, rel: ParentStudentRelationship) -> None:
        if rel.student is self:
            rel.detach()

    def add_class(self, school_class) -> None:
        if school_class is not None:
            school_class.add_student(self)

    def remove_class(self, school_class) -> None:
        if school_class is not None:
            school_class.remove_student(self)

    def add_daily_record(self, record) -> None:
        if record not in self.daily_records:
            self.daily_records.append(record)

    def remove_daily_record(self, record) -> None:
        if record in self.daily_records:
            self.daily_records.remove(record)


class ParentProfile(Base):
    __tablename__ = "parents"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    occupation = Column(String(100), nullable=True)
    address = Column(String(512), nullable=True)

    user = relationship("User", back_populates="parent_profile")
    parent_student_relationships = relationship(
        "ParentStudentRelationship", back_populates="parent", cascade="all, delete-orphan"
    )

    @validates("occupation")
    def _validate_occupation(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 100)

    @validates("address")
    def _validate_address(self, key: str, value: Optional[str]) -> Optional[str]:
        return check_max_length(value, key, 512)

    def find_student_relationship(self, student: StudentProfile) -> Optional[ParentStudentRelationship]:
        for rel in self.parent_student_relationships:
            if rel.student is student:
                return rel
        return None

    def add_student_relationship(self, student: StudentProfile, relationship_type: str) -> ParentStudentRelationship:
        existing = self.find_student_relationship(student)
        if existing is not None:
            return existing
        return ParentStudentRelationship(self, student, relationship_type)

    def remove_student_relationship(self, rel: ParentStudentRelationship) -> None:
        if rel.parent is self:
            rel.detach()


USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50


@event.listens_for(User, "before_insert")
@event.listens_for(User, "before_update")
def _check_username_length(mapper, connection, target: User) -> None:
    # Checked on write only: constructors accept short usernames.
    if target.username is not None and not USERNAME_MIN_LENGTH <= len(target.username) <= USERNAME_MAX_LENGTH:
        raise EntityValidationError(
            f"username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )


_PROFILE_TYPES = (AdminProfile, TeacherProfile, StudentProfile, ParentProfile)


@event.listens_for(Session, "before_flush")
def _touch_owner_of_changed_profile(session: Session, flush_context, instances) -> None:
    """A changed profile column counts as a change of its user, so the user's version is checked and bumped."""
    for obj in list(session.dirty):
        if not isinstance(obj, _PROFILE_TYPES) or not session.is_modified(obj, include_collections=False):
            continue
        user = obj.user
        if user is not None and user not in session.deleted:
            user.updated_at = _utcnow()
