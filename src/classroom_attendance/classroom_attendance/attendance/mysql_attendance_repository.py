from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from ..polls.model import CourseSession, Poll
from ..polls.mysql_poll_repository import POLL_COLUMNS, row_to_poll
from .model import (
    AttendanceRecord,
    ClassRecordRow,
    ClassSessionRow,
    SessionAttendanceRow,
    StudentAttendanceRow,
)
from .repository import AttendanceRepository, SubmissionUnit


class MySQLSubmissionUnit(SubmissionUnit):
    """Runs every step of a submission on one cursor, i.e. one transaction."""

    def __init__(self, cur):
        self._cur = cur

    def find_active_poll_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        self._cur.execute(
            f"""
            SELECT {POLL_COLUMNS}
            FROM attendance_polls
            WHERE code=%s AND active=1 AND expires_at > %s
            """,
            (code, now),
        )
        r = fetchone(self._cur)
        return row_to_poll(r) if r else None

    def find_poll_by_code(self, code: str) -> Optional[Poll]:
        self._cur.execute(f"SELECT {POLL_COLUMNS} FROM attendance_polls WHERE code=%s", (code,))
        r = fetchone(self._cur)
        return row_to_poll(r) if r else None

    def get_session(self, session_id: int) -> Optional[CourseSession]:
        self._cur.execute(
            "SELECT session_id, class_id, name, session_date FROM course_sessions WHERE session_id=%s",
            (int(session_id),),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return CourseSession(
            session_id=int(r["session_id"]),
            class_id=int(r["class_id"]),
            name=r["name"],
            session_date=r.get("session_date"),
        )

    def find_record(self, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        self._cur.execute(
            """
            SELECT record_id, student_id, session_id, poll_id, marked_at
            FROM attendance_records
            WHERE student_id=%s AND session_id=%s
            """,
            (int(student_id), int(session_id)),
        )
        r = fetchone(self._cur)
        if not r:
            return None
        return AttendanceRecord(
            record_id=int(r["record_id"]),
            student_id=int(r["student_id"]),
            session_id=int(r["session_id"]),
            poll_id=int(r["poll_id"]),
            marked_at=r["marked_at"],
        )

    def create_record(
        self,
        *,
        student_id: int,
        session_id: int,
        poll_id: int,
        marked_at: datetime,
    ) -> AttendanceRecord:
        try:
            self._cur.execute(
                """
                INSERT INTO attendance_records(student_id, session_id, poll_id, marked_at)
                VALUES(%s,%s,%s,%s)
                """,
                (int(student_id), int(session_id), int(poll_id), marked_at),
            )
        except Exception as e:
            # uq_attendance_student_session is the authoritative duplicate guard.
            if is_duplicate_key(e):
                raise DuplicateRecordError(int(student_id), int(session_id), cause=e) from e
            raise

        return AttendanceRecord(
            record_id=int(self._cur.lastrowid),
            student_id=int(student_id),
            session_id=int(session_id),
            poll_id=int(poll_id),
            marked_at=marked_at,
        )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def submission_unit(self) -> Iterator[MySQLSubmissionUnit]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLSubmissionUnit(cur)

    def list_for_session(self, session_id: int) -> Sequence[SessionAttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ar.student_id, ar.marked_at, ar.poll_id, p.code AS poll_code, u.name, u.email
                FROM attendance_records ar
                LEFT JOIN attendance_polls p ON p.poll_id = ar.poll_id
                LEFT JOIN users u ON u.user_id = ar.student_id
                WHERE ar.session_id=%s
                ORDER BY ar.marked_at ASC, ar.record_id ASC
                """,
                (int(session_id),),
            )
            return [
                SessionAttendanceRow(
                    student_id=int(r["student_id"]),
                    marked_at=r["marked_at"],
                    poll_id=int(r["poll_id"]) if r.get("poll_id") is not None else None,
                    poll_code=r.get("poll_code"),
                    name=r.get("name"),
                    email=r.get("email"),
                )
                for r in fetchall(cur)
            ]

    def list_for_student(self, student_id: int) -> Sequence[StudentAttendanceRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.class_id, c.name AS class_name,
                       cs.session_id, cs.name AS session_name, cs.session_date,
                       ar.marked_at, p.code AS poll_code
                FROM attendance_records ar
                JOIN course_sessions cs ON cs.session_id = ar.session_id
                JOIN classes c ON c.class_id = cs.class_id
                LEFT JOIN attendance_polls p ON p.poll_id = ar.poll_id
                WHERE ar.student_id=%s
                ORDER BY ar.marked_at DESC, ar.record_id DESC
                """,
                (int(student_id),),
            )
            return [
                StudentAttendanceRow(
                    class_id=int(r["class_id"]),
                    class_name=r["class_name"],
                    session_id=int(r["session_id"]),
                    session_name=r["session_name"],
                    session_date=r.get("session_date"),
                    marked_at=r["marked_at"],
                    poll_code=r.get("poll_code"),
                )
                for r in fetchall(cur)
            ]

    def list_sessions_for_class(self, class_id: int) -> Sequence[ClassSessionRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cs.session_id, cs.name, cs.session_date, COUNT(ar.record_id) AS attendance_count
                FROM course_sessions cs
                LEFT JOIN attendance_records ar ON ar.session_id = cs.session_id
                WHERE cs.class_id=%s
                GROUP BY cs.session_id, cs.name, cs.session_date
                ORDER BY cs.session_date DESC, cs.session_id DESC
                """,
                (int(class_id),),
            )
            return [
                ClassSessionRow(
                    session_id=int(r["session_id"]),
                    name=r["name"],
                    session_date=r.get("session_date"),
                    attendance_count=int(r.get("attendance_count") or 0),
                )
                for r in fetchall(cur)
            ]

    def list_records_for_class(self, class_id: int) -> Sequence[ClassRecordRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ar.session_id, ar.student_id, ar.marked_at, p.code AS poll_code
                FROM attendance_records ar
                JOIN course_sessions cs ON cs.session_id = ar.session_id
                LEFT JOIN attendance_polls p ON p.poll_id = ar.poll_id
                WHERE cs.class_id=%s
                ORDER BY ar.marked_at ASC
                """,
                (int(class_id),),
            )
            return [
                ClassRecordRow(
                    session_id=int(r["session_id"]),
                    student_id=int(r["student_id"]),
                    marked_at=r["marked_at"],
                    poll_code=r.get("poll_code"),
                )
                for r in fetchall(cur)
            ]
