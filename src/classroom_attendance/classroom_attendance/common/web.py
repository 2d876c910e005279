"""Helpers shared by the Flask controllers."""
from __future__ import annotations

from functools import wraps
from typing import Any, Sequence

from flask import jsonify, request, session

from ..core.enums import ClassRole, ErrorKind
from ..core.exceptions import AttendanceError
from ..enrollment.repository import EnrollmentRepository

HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.GONE: 410,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFLICT: 409,
    ErrorKind.EXHAUSTED: 500,
}


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "UNAUTHORIZED", "message": "Authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def request_data() -> dict[str, Any]:
    """Body as a dict, for both JSON and form-encoded requests."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


def error_response(e: AttendanceError):
    status = HTTP_STATUS[e.kind]
    return jsonify({"success": False, "error": e.kind.value, "message": e.message}), status


def require_class_role(
    enrollment: EnrollmentRepository, *, user_id: int, class_id: int, roles: Sequence[ClassRole], action: str
) -> ClassRole:
    role = enrollment.get_role(user_id, class_id)
    if role not in roles:
        raise AttendanceError(ErrorKind.FORBIDDEN, f"Only course staff can {action}", user_id=user_id, class_id=class_id)
    return role


def register_error_handlers(app) -> None:
    app.register_error_handler(AttendanceError, error_response)
