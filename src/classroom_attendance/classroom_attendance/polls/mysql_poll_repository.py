from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.exceptions import DuplicateCodeError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import CourseSession, Poll, PollSummary
from .repository import PollRepository, SessionRepository

POLL_COLUMNS = "poll_id, session_id, code, created_by, created_at, duration_minutes, expires_at, active"


def row_to_poll(r: dict) -> Poll:
    return Poll(
        poll_id=int(r["poll_id"]),
        session_id=int(r["session_id"]),
        code=str(r["code"]),
        created_by=int(r["created_by"]),
        created_at=r["created_at"],
        duration_minutes=int(r["duration_minutes"]),
        expires_at=r["expires_at"],
        active=bool(r["active"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[CourseSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT cs.session_id, cs.class_id, cs.name, cs.session_date, c.name AS class_name
                FROM course_sessions cs
                JOIN classes c ON c.class_id = cs.class_id
                WHERE cs.session_id=%s
                """,
                (int(session_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return CourseSession(
                session_id=int(r["session_id"]),
                class_id=int(r["class_id"]),
                name=r["name"],
                session_date=r.get("session_date"),
                class_name=r.get("class_name"),
            )


class MySQLPollRepository(PollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, poll_id: int) -> Optional[Poll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {POLL_COLUMNS} FROM attendance_polls WHERE poll_id=%s", (int(poll_id),))
            r = fetchone(cur)
            return row_to_poll(r) if r else None

    def find_by_code(self, code: str) -> Optional[Poll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {POLL_COLUMNS} FROM attendance_polls WHERE code=%s", (code,))
            r = fetchone(cur)
            return row_to_poll(r) if r else None

    def find_active_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {POLL_COLUMNS}
                FROM attendance_polls
                WHERE code=%s AND active=1 AND expires_at > %s
                """,
                (code, now),
            )
            r = fetchone(cur)
            return row_to_poll(r) if r else None

    def code_exists(self, code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS hit FROM attendance_polls WHERE code=%s LIMIT 1", (code,))
            return fetchone(cur) is not None

    def create(
        self,
        *,
        session_id: int,
        code: str,
        created_by: int,
        created_at: datetime,
        duration_minutes: int,
        expires_at: datetime,
    ) -> Poll:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_polls(session_id, code, created_by, created_at, duration_minutes, expires_at, active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (int(session_id), code, int(created_by), created_at, int(duration_minutes), expires_at),
                )
                poll_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise DuplicateCodeError(code, cause=e) from e
            raise

        return Poll(
            poll_id=poll_id,
            session_id=int(session_id),
            code=code,
            created_by=int(created_by),
            created_at=created_at,
            duration_minutes=int(duration_minutes),
            expires_at=expires_at,
            active=True,
        )

    def deactivate(self, poll_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # rowcount is 0 for an already-closed poll, so check existence separately.
            cur.execute("UPDATE attendance_polls SET active=0 WHERE poll_id=%s", (int(poll_id),))
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT 1 AS hit FROM attendance_polls WHERE poll_id=%s", (int(poll_id),))
            return fetchone(cur) is not None

    def list_for_session(self, session_id: int) -> Sequence[PollSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.poll_id, p.code, p.created_by, p.created_at, p.expires_at, p.active,
                       COUNT(ar.record_id) AS record_count
                FROM attendance_polls p
                LEFT JOIN attendance_records ar ON ar.poll_id = p.poll_id
                WHERE p.session_id=%s
                GROUP BY p.poll_id, p.code, p.created_by, p.created_at, p.expires_at, p.active
                ORDER BY p.created_at DESC, p.poll_id DESC
                """,
                (int(session_id),),
            )
            rows = fetchall(cur)
            return [
                PollSummary(
                    poll_id=int(r["poll_id"]),
                    code=str(r["code"]),
                    created_by=int(r["created_by"]),
                    created_at=r["created_at"],
                    expires_at=r["expires_at"],
                    active=bool(r["active"]),
                    record_count=int(r.get("record_count") or 0),
                )
                for r in rows
            ]
