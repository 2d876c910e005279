from __future__ import annotations

from ..app_logger import get_logger
from ..codes.generator import validate_format
from ..common.clock import Clock, SystemClock
from ..core.enums import ErrorKind
from ..core.exceptions import AttendanceError, DuplicateRecordError
from ..enrollment.repository import EnrollmentRepository
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = get_logger(__name__)


class SubmissionCoordinator:
    """Redeems an attendance code for a student, exactly once per session.

    Every step runs inside one unit of work from the record store. The lookups
    exist to pick the precise failure (NOT_FOUND vs GONE vs CONFLICT); the
    (student_id, session_id) unique constraint is what actually prevents
    duplicate credit when submissions race.
    """

    def __init__(
        self,
        records: AttendanceRepository,
        enrollment: EnrollmentRepository,
        *,
        clock: Clock | None = None,
    ):
        self._records = records
        self._enrollment = enrollment
        self._clock = clock or SystemClock()

    def submit(self, code: str, student_id: int) -> AttendanceRecord:
        try:
            record = self._submit(code, int(student_id))
        except AttendanceError as e:
            logger.warning("submission rejected: %s %s", e.kind.value, e.context)
            raise

        logger.info(
            "student %s marked present for session %s via poll %s",
            record.student_id,
            record.session_id,
            record.poll_id,
        )
        return record

    def _submit(self, code: str, student_id: int) -> AttendanceRecord:
        # Malformed input is indistinguishable from an unknown code.
        if not validate_format(code):
            raise AttendanceError(ErrorKind.NOT_FOUND, "Invalid code", student_id=student_id)

        with self._records.submission_unit() as unit:
            now = self._clock.now()

            poll = unit.find_active_poll_by_code(code, now=now)
            if not poll:
                stale = unit.find_poll_by_code(code)
                if stale:
                    raise AttendanceError(
                        ErrorKind.GONE,
                        "Code expired",
                        poll_id=stale.poll_id,
                        session_id=stale.session_id,
                        student_id=student_id,
                    )
                raise AttendanceError(ErrorKind.NOT_FOUND, "Invalid code", code=code, student_id=student_id)

            session = unit.get_session(poll.session_id)
            if not session or not self._enrollment.is_enrolled(student_id, session.class_id):
                raise AttendanceError(
                    ErrorKind.FORBIDDEN,
                    "Not enrolled in course",
                    poll_id=poll.poll_id,
                    session_id=poll.session_id,
                    student_id=student_id,
                )

            conflict = AttendanceError(
                ErrorKind.CONFLICT,
                "Already marked attendance for this session",
                poll_id=poll.poll_id,
                session_id=poll.session_id,
                student_id=student_id,
            )

            if unit.find_record(student_id, poll.session_id):
                raise conflict

            try:
                return unit.create_record(
                    student_id=student_id,
                    session_id=poll.session_id,
                    poll_id=poll.poll_id,
                    marked_at=now,
                )
            except DuplicateRecordError as e:
                # A concurrent submission committed between the pre-check and the insert.
                raise conflict from e
