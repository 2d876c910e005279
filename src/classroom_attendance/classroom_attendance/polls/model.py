from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class CourseSession:
    """A single meeting of a class. Owned by the scheduling side, read-only here."""

    session_id: int
    class_id: int
    name: str
    session_date: Optional[date] = None
    class_name: Optional[str] = None


@dataclass(frozen=True)
class Poll:
    """One open attendance window for one class session."""

    poll_id: int
    session_id: int
    code: str
    created_by: int
    created_at: datetime
    duration_minutes: int
    expires_at: datetime
    active: bool = True


@dataclass(frozen=True)
class PollSummary:
    """Read-model for listing the polls of a session."""

    poll_id: int
    code: str
    created_by: int
    created_at: datetime
    expires_at: datetime
    active: bool
    record_count: int
