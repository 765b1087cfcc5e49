from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_object
from ..common.web import handle_domain_errors, role_required
from ..container import Container
from ..core.enums import Role
from ..core.exceptions import ValidationError
from .model import IssuedCode
from .qr_renderer import render_qr_data_url


def register(app: Flask, container: Container) -> None:
    service = container.session_service

    def _issued_payload(issued: IssuedCode, message: str | None = None) -> dict:
        body = {
            "success": True,
            "session": {
                **issued.session.to_dict(),
                "checkinUrl": issued.checkin_url,
                "qrDataUrl": render_qr_data_url(issued.checkin_url),
            },
            "expiresIn": issued.expires_in,
        }
        if message:
            body["message"] = message
        return body

    @app.route("/api/sessions", methods=["GET"], endpoint="list_sessions")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to fetch sessions.")
    def list_sessions():
        overviews = service.list_for_teacher(g.caller)
        return jsonify(
            {
                "success": True,
                "sessions": [{**o.session.to_dict(), "attendanceCount": o.attendance_count} for o in overviews],
            }
        )

    @app.route("/api/sessions", methods=["POST"], endpoint="create_session")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to create session.")
    def create_session():
        data = require_object(request.get_json(silent=True))

        expires_at = None
        if data.get("expiresAt"):
            try:
                expires_at = parse_iso_datetime(str(data["expiresAt"]))
            except ValueError:
                raise ValidationError("expiresAt must be an ISO-8601 datetime.")

        created = service.create(
            g.caller,
            subject=data.get("subject"),
            room=data.get("room"),
            description=data.get("description"),
            expires_at=expires_at,
        )
        return jsonify({"success": True, "message": "Session created successfully!", "session": created.to_dict()}), 201

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="get_session")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to fetch session.")
    def get_session(session_id: int):
        detail = service.get_detail(g.caller, session_id)
        return jsonify(
            {
                "success": True,
                "session": detail.session.to_dict(),
                "attendance": [r.to_dict() for r in detail.attendance],
            }
        )

    @app.route("/api/sessions/<int:session_id>/start", methods=["POST"], endpoint="start_session")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to start session.")
    def start_session(session_id: int):
        issued = service.start(g.caller, session_id)
        return jsonify(_issued_payload(issued, "Session started! QR code generated."))

    @app.route("/api/sessions/<int:session_id>/refresh-qr", methods=["POST"], endpoint="refresh_qr")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to refresh QR.")
    def refresh_qr(session_id: int):
        issued = service.refresh_token(g.caller, session_id)
        return jsonify(_issued_payload(issued))

    @app.route("/api/sessions/<int:session_id>/stop", methods=["POST"], endpoint="stop_session")
    @role_required(Role.TEACHER)
    @handle_domain_errors("Failed to stop session.")
    def stop_session(session_id: int):
        stopped = service.stop(g.caller, session_id)
        return jsonify({"success": True, "message": "Session stopped.", "session": stopped.to_dict()})
