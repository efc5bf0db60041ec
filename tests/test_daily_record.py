"""DailyRecord construction rules."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.core.exceptions import EntityValidationError
from app.core.models import DailyRecord, SchoolClass


@pytest.fixture()
def math(teacher) -> SchoolClass:
    return SchoolClass("Math10A", teacher.teacher_profile, 30)


def _record(student_user, math, teacher_user, **overrides):
    kwargs = dict(
        record_date=date.today(),
        is_present=True,
        student=student_user.student_profile,
        school_class=math,
        teacher=teacher_user.teacher_profile,
    )
    kwargs.update(overrides)
    return DailyRecord(**kwargs)


@pytest.mark.parametrize("grade", [Decimal("-0.01"), Decimal("20.01"), -1, 21, 100])
def test_grade_out_of_range_is_rejected(student, math, teacher, grade) -> None:
    with pytest.raises(EntityValidationError):
        _record(student, math, teacher, grade=grade)


@pytest.mark.parametrize("grade", [0, Decimal("0.00"), Decimal("12.75"), 20, None])
def test_grade_in_range_or_missing_is_accepted(student, math, teacher, grade) -> None:
    record = _record(student, math, teacher, grade=grade)
    assert record.grade == (None if grade is None else Decimal(str(grade)))


@pytest.mark.parametrize("field", ["record_date", "is_present", "student", "school_class", "teacher"])
def test_missing_mandatory_field_is_rejected(student, math, teacher, field) -> None:
    with pytest.raises(EntityValidationError):
        _record(student, math, teacher, **{field: None})


def test_absence_is_a_valid_presence_flag(student, math, teacher) -> None:
    record = _record(student, math, teacher, is_present=False, description="sick")
    assert record.is_present is False
    assert record.description == "sick"


def test_future_date_is_rejected(student, math, teacher) -> None:
    with pytest.raises(EntityValidationError):
        _record(student, math, teacher, record_date=date.today() + timedelta(days=1))


def test_record_links_all_three_owners(student, math, teacher) -> None:
    record = _record(student, math, teacher)
    assert record in student.student_profile.daily_records
    assert record in math.daily_records
    assert record in teacher.teacher_profile.daily_records


def test_several_records_for_the_same_day_are_allowed(student, math, teacher) -> None:
    first = _record(student, math, teacher)
    second = _record(student, math, teacher, is_present=False)
    assert first is not second
    assert len(math.daily_records) == 2


def test_users_are_accepted_for_their_profiles(student, math, teacher) -> None:
    record = DailyRecord(date.today(), True, student, math, teacher)
    assert record.student is student.student_profile
    assert record.teacher is teacher.teacher_profile


@pytest.mark.parametrize("field", ["student", "school_class", "teacher"])
def test_owner_of_the_wrong_kind_is_rejected(student, math, teacher, field) -> None:
    # Each owner slot gets a valid object of another kind.
    wrong = {"student": teacher, "school_class": teacher.teacher_profile, "teacher": student}
    with pytest.raises(EntityValidationError):
        _record(student, math, teacher, **{field: wrong[field]})
    assert math.daily_records == []
