from __future__ import annotations

import logging
from functools import wraps

from flask import g, jsonify, session

from ..core.enums import Role
from ..core.exceptions import DomainError
from ..core.identity import Caller

logger = logging.getLogger(__name__)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def role_required(role: Role):
    """Require an authenticated caller (user_id + role in the Flask session) with `role`.

    The caller is exposed to the view as `g.caller`.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user_id = session.get("user_id")
            role_s = session.get("role")
            if user_id is None or not role_s:
                return error_response("Not authorized. No identity provided.", 401)

            try:
                caller = Caller(user_id=int(user_id), role=Role(role_s))
            except ValueError:
                return error_response("Not authorized. Invalid identity.", 401)

            if caller.role != role:
                return error_response("You do not have permission to perform this action.", 403)

            g.caller = caller
            return view(*args, **kwargs)

        return wrapper

    return decorator


def handle_domain_errors(failure_message: str):
    """Map DomainError to its HTTP status; anything else becomes a logged 500."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return error_response(str(e), e.http_status)
            except Exception:
                logger.exception("%s (%s)", failure_message, view.__name__)
                return error_response(failure_message, 500)

        return wrapper

    return decorator
