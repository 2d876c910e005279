from __future__ import annotations

from typing import Any, Optional

from .enums import ErrorKind


class DomainError(Exception):
    """Base exception for business rule violations."""


class AttendanceError(DomainError):
    """Tagged failure of a poll or submission operation.

    `kind` selects the outcome, `context` carries the ids involved so the
    failure can be logged without re-deriving them.
    """

    def __init__(self, kind: ErrorKind, message: str, **context: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def __repr__(self) -> str:
        return f"AttendanceError(kind={self.kind.value}, message={self.message!r}, context={self.context!r})"


class DuplicateRecordError(Exception):
    """Raised by a record store when the (student, session) uniqueness constraint rejects an insert."""

    def __init__(self, student_id: int, session_id: int, cause: Optional[BaseException] = None):
        super().__init__(f"record already exists for student={student_id} session={session_id}")
        self.student_id = student_id
        self.session_id = session_id
        self.cause = cause


class DuplicateCodeError(Exception):
    """Raised by a poll store when another poll already holds the code."""

    def __init__(self, code: str, cause: Optional[BaseException] = None):
        super().__init__(f"poll code already in use: {code}")
        self.code = code
        self.cause = cause
