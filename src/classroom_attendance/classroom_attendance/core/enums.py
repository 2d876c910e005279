from __future__ import annotations

from enum import Enum


class ClassRole(str, Enum):
    """Role of a user inside one class."""

    PROFESSOR = "PROFESSOR"
    TA = "TA"
    TUTOR = "TUTOR"
    STUDENT = "STUDENT"


ENROLLED_ROLES = (ClassRole.STUDENT, ClassRole.TA, ClassRole.TUTOR, ClassRole.PROFESSOR)
POLL_MANAGER_ROLES = (ClassRole.PROFESSOR, ClassRole.TA)
ROSTER_ROLES = (ClassRole.STUDENT, ClassRole.TA, ClassRole.TUTOR)


class ErrorKind(str, Enum):
    """Closed set of outcomes an attendance operation can fail with."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    GONE = "GONE"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    EXHAUSTED = "EXHAUSTED"
