from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import CourseSession, Poll, PollSummary


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[CourseSession]:
        raise NotImplementedError


class PollRepository(Protocol):
    def get_by_id(self, poll_id: int) -> Optional[Poll]:
        raise NotImplementedError

    def find_by_code(self, code: str) -> Optional[Poll]:
        """Any poll with this code, active or not, expired or not."""

        raise NotImplementedError

    def find_active_by_code(self, code: str, *, now: datetime) -> Optional[Poll]:
        raise NotImplementedError

    def code_exists(self, code: str) -> bool:
        raise NotImplementedError

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
        raise NotImplementedError

    def deactivate(self, poll_id: int) -> bool:
        """Set active=False. Returns False only when the poll does not exist."""

        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[PollSummary]:
        raise NotImplementedError
