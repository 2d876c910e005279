from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import ENROLLED_ROLES, ClassRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import ClassMember, EnrollmentRepository


def _in_clause(values: Sequence[object]) -> str:
    return ",".join(["%s"] * len(values))


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def is_enrolled(self, user_id: int, class_id: int) -> bool:
        roles = [r.value for r in ENROLLED_ROLES]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT 1 AS hit
                FROM class_roles
                WHERE user_id=%s AND class_id=%s AND role IN ({_in_clause(roles)})
                LIMIT 1
                """,
                (int(user_id), int(class_id), *roles),
            )
            return fetchone(cur) is not None

    def get_role(self, user_id: int, class_id: int) -> Optional[ClassRole]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM class_roles WHERE user_id=%s AND class_id=%s",
                (int(user_id), int(class_id)),
            )
            r = fetchone(cur)
            return ClassRole(r["role"]) if r else None

    def list_members(self, class_id: int, *, roles: Sequence[ClassRole]) -> Sequence[ClassMember]:
        if not roles:
            return []
        role_values = [r.value for r in roles]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT cr.user_id, cr.class_id, cr.role, u.name, u.email
                FROM class_roles cr
                LEFT JOIN users u ON u.user_id = cr.user_id
                WHERE cr.class_id=%s AND cr.role IN ({_in_clause(role_values)})
                ORDER BY u.name ASC, cr.user_id ASC
                """,
                (int(class_id), *role_values),
            )
            return [
                ClassMember(
                    user_id=int(r["user_id"]),
                    class_id=int(r["class_id"]),
                    role=ClassRole(r["role"]),
                    name=r.get("name"),
                    email=r.get("email"),
                )
                for r in fetchall(cur)
            ]
