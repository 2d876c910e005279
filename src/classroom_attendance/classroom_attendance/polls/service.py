from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Sequence

from ..app_logger import get_logger
from ..codes.generator import CodeGenerator
from ..common.clock import Clock, SystemClock
from ..common.validators import require_bounded_int
from ..core.constants import (
    DEFAULT_POLL_DURATION_MINUTES,
    MAX_POLL_DURATION_MINUTES,
    MIN_POLL_DURATION_MINUTES,
)
from ..core.enums import ErrorKind
from ..core.exceptions import AttendanceError, DuplicateCodeError
from .model import Poll, PollSummary
from .repository import PollRepository, SessionRepository

logger = get_logger(__name__)

# Insert-time collisions (two polls racing for one code) restart generation this many times.
_CREATE_ROUNDS = 2


@dataclass(frozen=True)
class DurationPolicy:
    default_minutes: int = DEFAULT_POLL_DURATION_MINUTES
    min_minutes: int = MIN_POLL_DURATION_MINUTES
    max_minutes: int = MAX_POLL_DURATION_MINUTES

    def resolve(self, value: Any) -> int:
        if value is None or (isinstance(value, str) and not value.strip()):
            return self.default_minutes
        return require_bounded_int(value, "duration_minutes", min_value=self.min_minutes, max_value=self.max_minutes)


class PollManager:
    """Owns the poll lifecycle: create, look up by code, close, expiry checks."""

    def __init__(
        self,
        polls: PollRepository,
        sessions: SessionRepository,
        *,
        clock: Clock | None = None,
        generator: CodeGenerator | None = None,
        durations: DurationPolicy | None = None,
    ):
        self._polls = polls
        self._sessions = sessions
        self._clock = clock or SystemClock()
        self._generator = generator or CodeGenerator()
        self._durations = durations or DurationPolicy()

    def _is_code_free(self, code: str) -> bool:
        # Codes are never recycled: inactive and expired polls still hold theirs.
        return not self._polls.code_exists(code)

    def create_poll(self, session_id: int, duration_minutes: Any, creator_id: int) -> Poll:
        duration = self._durations.resolve(duration_minutes)

        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise AttendanceError(ErrorKind.NOT_FOUND, "Session not found", session_id=session_id)

        for _ in range(_CREATE_ROUNDS):
            result = self._generator.generate(self._is_code_free)
            if not result.ok:
                logger.error(
                    "code generation exhausted after %d attempts (session=%s)", result.attempts, session.session_id
                )
                raise AttendanceError(
                    ErrorKind.EXHAUSTED,
                    "Could not generate a unique attendance code",
                    session_id=session.session_id,
                    attempts=result.attempts,
                )

            created_at = self._clock.now()
            try:
                poll = self._polls.create(
                    session_id=session.session_id,
                    code=result.code,
                    created_by=int(creator_id),
                    created_at=created_at,
                    duration_minutes=duration,
                    expires_at=created_at + timedelta(minutes=duration),
                )
            except DuplicateCodeError:
                logger.warning("code collided on insert, regenerating (session=%s)", session.session_id)
                continue

            logger.info(
                "poll %s opened for session %s by user %s (%d min)",
                poll.poll_id,
                poll.session_id,
                poll.created_by,
                poll.duration_minutes,
            )
            return poll

        logger.error("code generation exhausted by insert collisions (session=%s)", session.session_id)
        raise AttendanceError(
            ErrorKind.EXHAUSTED,
            "Could not generate a unique attendance code",
            session_id=session.session_id,
        )

    def find_active_by_code(self, code: str) -> Optional[Poll]:
        return self._polls.find_active_by_code(code, now=self._clock.now())

    def is_expired(self, poll: Optional[Poll]) -> bool:
        return poll is None or self._clock.now() >= poll.expires_at

    def get_poll(self, poll_id: int) -> Poll:
        poll = self._polls.get_by_id(int(poll_id))
        if not poll:
            raise AttendanceError(ErrorKind.NOT_FOUND, "Poll not found", poll_id=poll_id)
        return poll

    def deactivate(self, poll_id: int) -> None:
        """Close a poll early. Closing an already-closed poll is a no-op."""
        if not self._polls.deactivate(int(poll_id)):
            raise AttendanceError(ErrorKind.NOT_FOUND, "Poll not found", poll_id=poll_id)
        logger.info("poll %s closed", poll_id)

    def list_for_session(self, session_id: int) -> Sequence[PollSummary]:
        return self._polls.list_for_session(int(session_id))
