from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user_id, login_required, request_data, require_class_role
from ..container import Container
from ..core.enums import POLL_MANAGER_ROLES, ErrorKind
from ..core.exceptions import AttendanceError


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/submit", methods=["POST"], endpoint="submit_attendance")
    @login_required
    def submit_attendance():
        # student_id always comes from the authenticated session, never the body.
        code = str(request_data().get("code") or "").strip()
        record = container.submission_coordinator.submit(code, current_user_id())
        return jsonify(
            {
                "success": True,
                "status": "success",
                "student_id": record.student_id,
                "session_id": record.session_id,
                "poll_id": record.poll_id,
                "marked_at": record.marked_at.isoformat(),
            }
        )

    @app.route("/attendance/sessions/<int:session_id>", methods=["GET"], endpoint="session_attendance")
    @login_required
    def session_attendance(session_id: int):
        session = container.sessions_repo.get_by_id(session_id)
        if not session:
            raise AttendanceError(ErrorKind.NOT_FOUND, "Session not found", session_id=session_id)
        require_class_role(
            container.enrollment_repo,
            user_id=current_user_id(),
            class_id=session.class_id,
            roles=POLL_MANAGER_ROLES,
            action="view session attendance",
        )
        return jsonify(container.report_service.session_attendance(session_id))

    @app.route("/attendance/classes/<int:class_id>/summary", methods=["GET"], endpoint="class_attendance_summary")
    @login_required
    def class_attendance_summary(class_id: int):
        require_class_role(
            container.enrollment_repo,
            user_id=current_user_id(),
            class_id=class_id,
            roles=POLL_MANAGER_ROLES,
            action="view the attendance summary",
        )
        summary = container.report_service.course_summary(class_id)
        return jsonify({"class_id": summary.class_id, "sessions": summary.sessions, "students": summary.students})

    @app.route("/attendance/me", methods=["GET"], endpoint="my_attendance")
    @login_required
    def my_attendance():
        if request.args.get("group") == "class":
            return jsonify({"classes": container.report_service.student_history_by_class(current_user_id())})
        return jsonify({"attendance": container.report_service.student_history(current_user_id())})
