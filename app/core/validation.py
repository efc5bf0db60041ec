"""Argument checks shared by the entity constructors and attribute validators."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.core.enums import MAX_GRADE, Role
from app.core.exceptions import EntityValidationError


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise EntityValidationError(f"{field} must not be blank")
    return value


def require_present(value: Any, field: str) -> Any:
    if value is None:
        raise EntityValidationError(f"{field} is required")
    return value


def check_max_length(value: Optional[str], field: str, max_length: int) -> Optional[str]:
    if value is not None and len(value) > max_length:
        raise EntityValidationError(f"{field} must be at most {max_length} characters")
    return value


def to_grade(value: Any, field: str) -> Optional[Decimal]:
    """Coerce a score to Decimal and check it lies on the 0..20 scale. None passes through."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise EntityValidationError(f"{field} must be a number")
    try:
        grade = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise EntityValidationError(f"{field} must be a number") from e
    if not grade.is_finite() or grade < 0 or grade > MAX_GRADE:
        raise EntityValidationError(f"{field} must be between 0 and {MAX_GRADE}")
    return grade


def check_not_future(value: Optional[date], field: str) -> Optional[date]:
    if value is not None and value > date.today():
        raise EntityValidationError(f"{field} cannot be in the future")
    return value


def check_past(value: Optional[date], field: str) -> Optional[date]:
    if value is not None and value >= date.today():
        raise EntityValidationError(f"{field} must be in the past")
    return value


def require_owner(entity: Any, relationship_key: str, value: Any, role: Role) -> Any:
    """Resolve ``value`` to the profile that ``entity.<relationship_key>`` points at.

    A user tagged with ``role`` is unwrapped to its profile; anything else that
    is not already such a profile is rejected.
    """
    require_present(value, relationship_key)
    profile_type = entity.__mapper__.relationships[relationship_key].mapper.class_
    if getattr(value, "role", None) == role:
        value = value.profile
    if not isinstance(value, profile_type):
        raise EntityValidationError(f"{relationship_key} must be a {role.value.lower()}")
    return value
