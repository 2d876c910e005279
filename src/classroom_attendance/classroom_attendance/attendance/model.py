from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Durable proof that a student redeemed a poll for a session."""

    record_id: int
    student_id: int
    session_id: int
    poll_id: int
    marked_at: datetime


@dataclass(frozen=True)
class SessionAttendanceRow:
    """Read-model: one student marked present in one session."""

    student_id: int
    marked_at: datetime
    poll_id: Optional[int]
    poll_code: Optional[str]
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class StudentAttendanceRow:
    """Read-model: one of a student's records joined with its class and session."""

    class_id: int
    class_name: str
    session_id: int
    session_name: str
    session_date: Optional[date]
    marked_at: datetime
    poll_code: Optional[str] = None


@dataclass(frozen=True)
class ClassSessionRow:
    """Read-model: a session of a class with its attendance count."""

    session_id: int
    name: str
    session_date: Optional[date]
    attendance_count: int


@dataclass(frozen=True)
class ClassRecordRow:
    session_id: int
    student_id: int
    marked_at: datetime
    poll_code: Optional[str] = None
