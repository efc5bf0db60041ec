"""Role constructors.

Each builds a transient ``User`` tagged with its role and carrying the matching
profile. Mandatory fields are checked here, not in ``User`` itself, and a
blank or missing one raises ``EntityValidationError``.
"""
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from app.auth.models import AdminProfile, ParentProfile, StudentProfile, TeacherProfile, User
from app.core.enums import Role
from app.core.validation import require_present, require_text, to_grade

Number = Union[Decimal, int, float, str]


def _new_user(
    role: Role,
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: Optional[str],
    phone_number: Optional[str],
    avatar_url: Optional[str],
    enabled: bool,
) -> User:
    require_text(username, "username")
    require_text(password, "password")
    require_text(first_name, "first_name")
    require_text(last_name, "last_name")
    return User(
        username=username,
        password=password,
        role=role,
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone_number=phone_number,
        avatar_url=avatar_url,
        enabled=enabled,
    )


def new_admin(
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    avatar_url: Optional[str] = None,
    enabled: bool = True,
) -> User:
    user = _new_user(Role.ADMIN, username, password, first_name, last_name, email, phone_number, avatar_url, enabled)
    user.admin_profile = AdminProfile()
    return user


def new_teacher(
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    avatar_url: Optional[str] = None,
    enabled: bool = True,
    employee_id: Optional[str] = None,
    specialization: Optional[str] = None,
) -> User:
    require_text(specialization, "specialization")
    user = _new_user(Role.TEACHER, username, password, first_name, last_name, email, phone_number, avatar_url, enabled)
    user.teacher_profile = TeacherProfile(employee_id=employee_id, specialization=specialization)
    return user


def new_student(
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    avatar_url: Optional[str] = None,
    enabled: bool = True,
    student_code: Optional[str] = None,
    grade_level: Optional[str] = None,
    last_average: Optional[Number] = None,
    date_of_birth: Optional[date] = None,
    description: Optional[str] = None,
) -> User:
    require_text(grade_level, "grade_level")
    require_present(last_average, "last_average")
    average = to_grade(last_average, "last_average")
    user = _new_user(Role.STUDENT, username, password, first_name, last_name, email, phone_number, avatar_url, enabled)
    user.student_profile = StudentProfile(
        student_code=student_code,
        grade_level=grade_level,
        last_average=average,
        date_of_birth=date_of_birth,
        description=description,
    )
    return user


def new_parent(
    username: str,
    password: str,
    first_name: str,
    last_name: str,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
    avatar_url: Optional[str] = None,
    enabled: bool = True,
    occupation: Optional[str] = None,
    address: Optional[str] = None,
) -> User:
    user = _new_user(Role.PARENT, username, password, first_name, last_name, email, phone_number, avatar_url, enabled)
    user.parent_profile = ParentProfile(occupation=occupation, address=address)
    return user
