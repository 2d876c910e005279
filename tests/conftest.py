from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Optional

import pytest

from src.classroom_attendance.classroom_attendance.attendance.model import (
    AttendanceRecord,
    ClassRecordRow,
    ClassSessionRow,
    SessionAttendanceRow,
    StudentAttendanceRow,
)
from src.classroom_attendance.classroom_attendance.attendance.report_service import AttendanceReportService
from src.classroom_attendance.classroom_attendance.attendance.service import SubmissionCoordinator
from src.classroom_attendance.classroom_attendance.codes.generator import CodeGenerator
from src.classroom_attendance.classroom_attendance.core.enums import ClassRole
from src.classroom_attendance.classroom_attendance.core.exceptions import DuplicateCodeError, DuplicateRecordError
from src.classroom_attendance.classroom_attendance.enrollment.repository import ClassMember
from src.classroom_attendance.classroom_attendance.polls.model import CourseSession, Poll, PollSummary
from src.classroom_attendance.classroom_attendance.polls.service import PollManager

T0 = datetime(2026, 10, 5, 9, 0, 0)

CLASS_ID = 7
OTHER_CLASS_ID = 8
SESSION_ID = 70
OTHER_SESSION_ID = 80

PROFESSOR_ID = 1
TA_ID = 2
ALICE_ID = 11
BOB_ID = 12
OUTSIDER_ID = 99


class FixedClock:
    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now

    def advance(self, **kwargs) -> None:
        self._now = self._now + timedelta(**kwargs)


class SequenceRandom:
    """Stand-in for secrets.randbelow that replays fixed values."""

    def __init__(self, values):
        self._values = list(values)
        self.calls: list[int] = []

    def __call__(self, upper: int) -> int:
        self.calls.append(upper)
        value = self._values.pop(0) if len(self._values) > 1 else self._values[0]
        assert 0 <= value < upper
        return value


class InMemorySessions:
    def __init__(self, sessions: dict[int, CourseSession]):
        self._sessions = sessions

    def get_by_id(self, session_id: int) -> Optional[CourseSession]:
        return self._sessions.get(int(session_id))

    def all(self):
        return list(self._sessions.values())


class InMemoryPolls:
    def __init__(self):
        self._by_id: dict[int, Poll] = {}
        self._lock = threading.Lock()
        self._next_id = 1
        self.record_counts: Callable[[int], int] = lambda poll_id: 0

    def get_by_id(self, poll_id: int) -> Optional[Poll]:
        return self._by_id.get(int(poll_id))

    def find_by_code(self, code: str) -> Optional[Poll]:
        return next((p for p in self._by_id.values() if p.code == code), None)

    def find_active_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        poll = self.find_by_code(code)
        if poll and poll.active and poll.expires_at > now:
            return poll
        return None

    def code_exists(self, code: str) -> bool:
        return self.find_by_code(code) is not None

    def create(self, *, session_id, code, created_by, created_at, duration_minutes, expires_at) -> Poll:
        with self._lock:
            if self.code_exists(code):
                raise DuplicateCodeError(code)
            poll = Poll(
                poll_id=self._next_id,
                session_id=int(session_id),
                code=code,
                created_by=int(created_by),
                created_at=created_at,
                duration_minutes=int(duration_minutes),
                expires_at=expires_at,
                active=True,
            )
            self._by_id[poll.poll_id] = poll
            self._next_id += 1
            return poll

    def deactivate(self, poll_id: int) -> bool:
        poll = self._by_id.get(int(poll_id))
        if not poll:
            return False
        self._by_id[poll.poll_id] = Poll(**{**poll.__dict__, "active": False})
        return True

    def list_for_session(self, session_id: int):
        polls = [p for p in self._by_id.values() if p.session_id == int(session_id)]
        polls.sort(key=lambda p: (p.created_at, p.poll_id), reverse=True)
        return [
            PollSummary(
                poll_id=p.poll_id,
                code=p.code,
                created_by=p.created_by,
                created_at=p.created_at,
                expires_at=p.expires_at,
                active=p.active,
                record_count=self.record_counts(p.poll_id),
            )
            for p in polls
        ]


class InMemoryEnrollment:
    def __init__(self, roles: dict[tuple[int, int], ClassRole], names: dict[int, str] | None = None):
        self._roles = roles
        self._names = names or {}
        self.checks: list[tuple[int, int]] = []

    def is_enrolled(self, user_id: int, class_id: int) -> bool:
        self.checks.append((int(user_id), int(class_id)))
        return (int(user_id), int(class_id)) in self._roles

    def get_role(self, user_id: int, class_id: int) -> Optional[ClassRole]:
        return self._roles.get((int(user_id), int(class_id)))

    def list_members(self, class_id: int, *, roles):
        return [
            ClassMember(user_id=u, class_id=c, role=r, name=self._names.get(u), email=f"user{u}@example.edu")
            for (u, c), r in sorted(self._roles.items())
            if c == int(class_id) and r in roles
        ]


class InMemorySubmissionUnit:
    def __init__(self, store: "InMemoryAttendance"):
        self._store = store

    def find_active_poll_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        return self._store.polls.find_active_by_code(code, now=now)

    def find_poll_by_code(self, code: str) -> Optional[Poll]:
        return self._store.polls.find_by_code(code)

    def get_session(self, session_id: int) -> Optional[CourseSession]:
        return self._store.sessions.get_by_id(session_id)

    def find_record(self, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        found = None if self._store.blind_precheck else self._store.records.get((student_id, session_id))
        if self._store.after_precheck:
            self._store.after_precheck()
        return found

    def create_record(self, *, student_id, session_id, poll_id, marked_at) -> AttendanceRecord:
        # The lock plays the role of the (student_id, session_id) unique index.
        with self._store.lock:
            key = (int(student_id), int(session_id))
            if key in self._store.records:
                raise DuplicateRecordError(int(student_id), int(session_id))
            self._store.next_id += 1
            record = AttendanceRecord(
                record_id=self._store.next_id,
                student_id=int(student_id),
                session_id=int(session_id),
                poll_id=int(poll_id),
                marked_at=marked_at,
            )
            self._store.records[key] = record
            return record


class InMemoryAttendance:
    def __init__(self, polls: InMemoryPolls, sessions: InMemorySessions, class_names: dict[int, str]):
        self.polls = polls
        self.sessions = sessions
        self.class_names = class_names
        self.records: dict[tuple[int, int], AttendanceRecord] = {}
        self.lock = threading.Lock()
        self.next_id = 0
        self.units_opened = 0
        # Hooks for race tests: skip the pre-check, or block right after it.
        self.blind_precheck = False
        self.after_precheck: Optional[Callable[[], None]] = None
        polls.record_counts = lambda poll_id: sum(1 for r in self.records.values() if r.poll_id == poll_id)

    @contextmanager
    def submission_unit(self):
        self.units_opened += 1
        yield InMemorySubmissionUnit(self)

    def list_for_session(self, session_id: int):
        rows = sorted(
            (r for r in self.records.values() if r.session_id == int(session_id)),
            key=lambda r: (r.marked_at, r.record_id),
        )
        return [
            SessionAttendanceRow(
                student_id=r.student_id,
                marked_at=r.marked_at,
                poll_id=r.poll_id,
                poll_code=self.polls.get_by_id(r.poll_id).code,
            )
            for r in rows
        ]

    def list_for_student(self, student_id: int):
        rows = sorted(
            (r for r in self.records.values() if r.student_id == int(student_id)),
            key=lambda r: (r.marked_at, r.record_id),
            reverse=True,
        )
        out = []
        for r in rows:
            s = self.sessions.get_by_id(r.session_id)
            out.append(
                StudentAttendanceRow(
                    class_id=s.class_id,
                    class_name=self.class_names[s.class_id],
                    session_id=s.session_id,
                    session_name=s.name,
                    session_date=s.session_date,
                    marked_at=r.marked_at,
                    poll_code=self.polls.get_by_id(r.poll_id).code,
                )
            )
        return out

    def list_sessions_for_class(self, class_id: int):
        return [
            ClassSessionRow(
                session_id=s.session_id,
                name=s.name,
                session_date=s.session_date,
                attendance_count=sum(1 for r in self.records.values() if r.session_id == s.session_id),
            )
            for s in self.sessions.all()
            if s.class_id == int(class_id)
        ]

    def list_records_for_class(self, class_id: int):
        session_ids = {s.session_id for s in self.sessions.all() if s.class_id == int(class_id)}
        return [
            ClassRecordRow(
                session_id=r.session_id,
                student_id=r.student_id,
                marked_at=r.marked_at,
                poll_code=self.polls.get_by_id(r.poll_id).code,
            )
            for r in sorted(self.records.values(), key=lambda r: r.marked_at)
            if r.session_id in session_ids
        ]


@pytest.fixture
def clock():
    return FixedClock(T0)


@pytest.fixture
def sessions():
    return InMemorySessions(
        {
            SESSION_ID: CourseSession(session_id=SESSION_ID, class_id=CLASS_ID, name="Lecture 1"),
            OTHER_SESSION_ID: CourseSession(session_id=OTHER_SESSION_ID, class_id=OTHER_CLASS_ID, name="Seminar 1"),
        }
    )


@pytest.fixture
def polls():
    return InMemoryPolls()


@pytest.fixture
def enrollment():
    return InMemoryEnrollment(
        {
            (PROFESSOR_ID, CLASS_ID): ClassRole.PROFESSOR,
            (TA_ID, CLASS_ID): ClassRole.TA,
            (ALICE_ID, CLASS_ID): ClassRole.STUDENT,
            (BOB_ID, CLASS_ID): ClassRole.STUDENT,
            (OUTSIDER_ID, OTHER_CLASS_ID): ClassRole.STUDENT,
        },
        names={ALICE_ID: "Alice", BOB_ID: "Bob", TA_ID: "Tess"},
    )


@pytest.fixture
def records(polls, sessions):
    return InMemoryAttendance(polls, sessions, {CLASS_ID: "CSE 110", OTHER_CLASS_ID: "ART 101"})


@pytest.fixture
def poll_manager(polls, sessions, clock):
    return PollManager(polls, sessions, clock=clock, generator=CodeGenerator())


@pytest.fixture
def coordinator(records, enrollment, clock):
    return SubmissionCoordinator(records, enrollment, clock=clock)


@pytest.fixture
def report_service(records, polls, sessions, enrollment):
    return AttendanceReportService(records, polls, sessions, enrollment)
