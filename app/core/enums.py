from enum import Enum


class Role(str, Enum):
    """Role tag stored in users.user_type. Selects the role profile of a user."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


# Prefix of the single authority granted to a user, e.g. ROLE_TEACHER.
AUTHORITY_PREFIX = "ROLE_"

# Upper bound of the 0..20 grading scale used for averages and daily grades.
MAX_GRADE = 20
