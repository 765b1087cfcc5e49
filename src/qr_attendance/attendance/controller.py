from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.validators import require_object
from ..common.web import handle_domain_errors, role_required
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    service = container.checkin_service

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="checkin")
    @role_required(Role.STUDENT)
    @handle_domain_errors("Failed to mark attendance.")
    def checkin():
        data = require_object(request.get_json(silent=True))
        record = service.check_in(g.caller, str(data.get("token") or ""), origin=request.remote_addr)
        return (
            jsonify(
                {
                    "success": True,
                    "message": f"Attendance marked as {record.status.value}!",
                    "attendance": record.to_dict(),
                }
            ),
            201,
        )

    @app.route("/api/attendance/verify/<token>", methods=["GET"], endpoint="verify_token")
    @role_required(Role.STUDENT)
    @handle_domain_errors("Failed to verify token.")
    def verify_token(token: str):
        result = service.verify(g.caller, token)
        return jsonify(
            {
                "success": True,
                "session": {
                    "id": result.session.session_id,
                    "subject": result.session.subject,
                    "room": result.session.room,
                    "teacherId": result.session.teacher_id,
                },
                "alreadyAttended": result.already_attended,
            }
        )

    @app.route("/api/attendance/my", methods=["GET"], endpoint="my_attendance")
    @role_required(Role.STUDENT)
    @handle_domain_errors("Failed to fetch attendance history.")
    def my_attendance():
        records = service.history(g.caller)
        return jsonify({"success": True, "attendance": [r.to_dict() for r in records]})
