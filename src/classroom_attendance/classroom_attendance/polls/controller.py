from __future__ import annotations

import io

import qrcode
from flask import Flask, jsonify, send_file

from ..common.validators import require_id
from ..common.web import current_user_id, login_required, request_data, require_class_role
from ..container import Container
from ..core.enums import POLL_MANAGER_ROLES, ErrorKind
from ..core.exceptions import AttendanceError
from .model import Poll


def _poll_json(poll: Poll) -> dict:
    return {
        "poll_id": poll.poll_id,
        "session_id": poll.session_id,
        "code": poll.code,
        "duration_minutes": poll.duration_minutes,
        "created_at": poll.created_at.isoformat(),
        "expires_at": poll.expires_at.isoformat(),
        "active": poll.active,
    }


def register(app: Flask, container: Container) -> None:
    def _require_staff_for_session(session_id: int, *, action: str):
        session = container.sessions_repo.get_by_id(session_id)
        if not session:
            raise AttendanceError(ErrorKind.NOT_FOUND, "Session not found", session_id=session_id)
        require_class_role(
            container.enrollment_repo,
            user_id=current_user_id(),
            class_id=session.class_id,
            roles=POLL_MANAGER_ROLES,
            action=action,
        )
        return session

    @app.route("/attendance/polls", methods=["POST"], endpoint="create_poll")
    @login_required
    def create_poll():
        data = request_data()
        session_id = require_id(data.get("session_id"), "session_id")
        _require_staff_for_session(session_id, action="create attendance polls")

        poll = container.poll_manager.create_poll(session_id, data.get("duration_minutes"), current_user_id())
        return jsonify({"success": True, **_poll_json(poll)}), 201

    @app.route("/attendance/polls/<int:poll_id>/close", methods=["POST", "PATCH"], endpoint="close_poll")
    @login_required
    def close_poll(poll_id: int):
        poll = container.poll_manager.get_poll(poll_id)
        _require_staff_for_session(poll.session_id, action="close attendance polls")

        container.poll_manager.deactivate(poll.poll_id)
        return jsonify({"success": True, "poll_id": poll.poll_id, "active": False})

    @app.route("/attendance/polls/<int:poll_id>/qr", methods=["GET"], endpoint="poll_qr_image")
    @login_required
    def poll_qr_image(poll_id: int):
        """PNG of the poll code for projecting in the classroom."""
        poll = container.poll_manager.get_poll(poll_id)
        _require_staff_for_session(poll.session_id, action="display attendance codes")
        if container.poll_manager.is_expired(poll) or not poll.active:
            raise AttendanceError(ErrorKind.GONE, "Code expired", poll_id=poll.poll_id, session_id=poll.session_id)

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(poll.code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")
