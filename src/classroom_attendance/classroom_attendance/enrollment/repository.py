from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from ..core.enums import ClassRole


@dataclass(frozen=True)
class ClassMember:
    user_id: int
    class_id: int
    role: ClassRole
    name: Optional[str] = None
    email: Optional[str] = None


class EnrollmentRepository(Protocol):
    def is_enrolled(self, user_id: int, class_id: int) -> bool:
        raise NotImplementedError

    def get_role(self, user_id: int, class_id: int) -> Optional[ClassRole]:
        raise NotImplementedError

    def list_members(self, class_id: int, *, roles: Sequence[ClassRole]) -> Sequence[ClassMember]:
        raise NotImplementedError
