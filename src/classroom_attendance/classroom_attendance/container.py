from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.report_service import AttendanceReportService
from .attendance.service import SubmissionCoordinator
from .codes.generator import CodeGenerator
from .common.clock import Clock, SystemClock
from .database.connection import DatabaseConnection, DBConfig
from .enrollment.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollment.repository import EnrollmentRepository
from .polls.mysql_poll_repository import MySQLPollRepository, MySQLSessionRepository
from .polls.repository import SessionRepository
from .polls.service import DurationPolicy, PollManager


@dataclass(frozen=True)
class Container:
    sessions_repo: SessionRepository
    enrollment_repo: EnrollmentRepository

    poll_manager: PollManager
    submission_coordinator: SubmissionCoordinator
    report_service: AttendanceReportService


def build_container(*, db_config: dict, durations: DurationPolicy | None = None, clock: Clock | None = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    clock = clock or SystemClock()

    sessions_repo = MySQLSessionRepository(conn)
    polls_repo = MySQLPollRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    enrollment_repo = MySQLEnrollmentRepository(conn)

    poll_manager = PollManager(
        polls_repo,
        sessions_repo,
        clock=clock,
        generator=CodeGenerator(),
        durations=durations,
    )
    submission_coordinator = SubmissionCoordinator(attendance_repo, enrollment_repo, clock=clock)
    report_service = AttendanceReportService(attendance_repo, polls_repo, sessions_repo, enrollment_repo)

    return Container(
        sessions_repo=sessions_repo,
        enrollment_repo=enrollment_repo,
        poll_manager=poll_manager,
        submission_coordinator=submission_coordinator,
        report_service=report_service,
    )
