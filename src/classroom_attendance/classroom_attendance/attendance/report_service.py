from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ROSTER_ROLES, ErrorKind
from ..core.exceptions import AttendanceError
from ..enrollment.repository import EnrollmentRepository
from ..polls.repository import PollRepository, SessionRepository
from .repository import AttendanceRepository


def _iso(value: Optional[date | datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class CourseSummary:
    class_id: int
    sessions: list[dict]
    students: list[dict]


class AttendanceReportService:
    """Read-side views over polls and records (professor and student pages)."""

    def __init__(
        self,
        records: AttendanceRepository,
        polls: PollRepository,
        sessions: SessionRepository,
        enrollment: EnrollmentRepository,
    ):
        self._records = records
        self._polls = polls
        self._sessions = sessions
        self._enrollment = enrollment

    def session_attendance(self, session_id: int) -> dict:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise AttendanceError(ErrorKind.NOT_FOUND, "Session not found", session_id=session_id)

        polls = self._polls.list_for_session(session.session_id)
        rows = self._records.list_for_session(session.session_id)
        return {
            "session_id": session.session_id,
            "session_name": session.name,
            "polls": [
                {
                    "poll_id": p.poll_id,
                    "code": p.code,
                    "created_at": _iso(p.created_at),
                    "expires_at": _iso(p.expires_at),
                    "active": p.active,
                    "record_count": p.record_count,
                }
                for p in polls
            ],
            "attendance": [
                {
                    "student_id": r.student_id,
                    "name": r.name,
                    "email": r.email,
                    "marked_at": _iso(r.marked_at),
                    "poll_id": r.poll_id,
                    "poll_code": r.poll_code,
                }
                for r in rows
            ],
        }

    def student_history(self, student_id: int) -> list[dict]:
        return [
            {
                "class_id": r.class_id,
                "class_name": r.class_name,
                "session_id": r.session_id,
                "session_name": r.session_name,
                "date": _iso(r.session_date),
                "status": "present",
                "marked_at": _iso(r.marked_at),
                "poll_code": r.poll_code,
            }
            for r in self._records.list_for_student(int(student_id))
        ]

    def student_history_by_class(self, student_id: int) -> list[dict]:
        grouped: dict[int, dict] = {}
        for item in self.student_history(student_id):
            bucket = grouped.setdefault(
                item["class_id"],
                {"class_id": item["class_id"], "class_name": item["class_name"], "attendances": []},
            )
            bucket["attendances"].append(
                {k: item[k] for k in ("session_id", "session_name", "date", "status", "marked_at", "poll_code")}
            )
        return sorted(grouped.values(), key=lambda g: (g["class_name"] or "").lower())

    def course_summary(self, class_id: int) -> CourseSummary:
        sessions = self._records.list_sessions_for_class(int(class_id))
        members = self._enrollment.list_members(int(class_id), roles=ROSTER_ROLES)
        total = len(sessions)

        students: dict[int, dict] = {
            m.user_id: {
                "student_id": m.user_id,
                "name": m.name,
                "email": m.email,
                "sessions": {},
                "total_sessions": total,
                "present_count": 0,
            }
            for m in members
        }

        for r in self._records.list_records_for_class(int(class_id)):
            entry = students.get(r.student_id)
            # Records of users no longer on the roster are not counted.
            if entry is None:
                continue
            entry["sessions"][r.session_id] = {
                "present": True,
                "marked_at": _iso(r.marked_at),
                "poll_code": r.poll_code,
            }
            entry["present_count"] += 1

        for entry in students.values():
            entry["attendance_percentage"] = (entry["present_count"] * 200 + total) // (2 * total) if total else 0

        return CourseSummary(
            class_id=int(class_id),
            sessions=[
                {
                    "session_id": s.session_id,
                    "name": s.name,
                    "date": _iso(s.session_date),
                    "attendance_count": s.attendance_count,
                }
                for s in sessions
            ],
            students=list(students.values()),
        )
