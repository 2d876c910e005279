from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..polls.model import CourseSession, Poll
from .model import (
    AttendanceRecord,
    ClassRecordRow,
    ClassSessionRow,
    SessionAttendanceRow,
    StudentAttendanceRow,
)


class SubmissionUnit(Protocol):
    """Reads and the record insert of one submission, sharing one transaction."""

    def find_active_poll_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        raise NotImplementedError

    def find_poll_by_code(self, code: str) -> Optional[Poll]:
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[CourseSession]:
        raise NotImplementedError

    def find_record(self, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        student_id: int,
        session_id: int,
        poll_id: int,
        marked_at: datetime,
    ) -> AttendanceRecord:
        """Insert a record.

        Must raise DuplicateRecordError when the (student_id, session_id)
        uniqueness constraint rejects the row.
        """

        raise NotImplementedError


class AttendanceRepository(Protocol):
    def submission_unit(self) -> ContextManager[SubmissionUnit]:
        """Open a unit of work: committed when the block exits cleanly, rolled back otherwise."""

        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[SessionAttendanceRow]:
        raise NotImplementedError

    def list_for_student(self, student_id: int) -> Sequence[StudentAttendanceRow]:
        raise NotImplementedError

    def list_sessions_for_class(self, class_id: int) -> Sequence[ClassSessionRow]:
        raise NotImplementedError

    def list_records_for_class(self, class_id: int) -> Sequence[ClassRecordRow]:
        raise NotImplementedError
