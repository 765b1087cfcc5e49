"""Example: drive the service layer directly (no Flask), in-memory storage.

Controllers are a thin layer; the session/check-in rules live in the services.
"""

from datetime import timedelta

from qr_attendance.common.datetime_utils import now_utc
from qr_attendance.config import testing as settings
from qr_attendance.container import build_container
from qr_attendance.core.enums import Role
from qr_attendance.core.identity import Caller


def main():
    container = build_container(settings)
    teacher = Caller(user_id=1, role=Role.TEACHER)
    student = Caller(user_id=2, role=Role.STUDENT)

    now = now_utc()
    session = container.session_service.create(teacher, subject="Algebra", room="R101", now=now)
    issued = container.session_service.start(teacher, session.session_id, now=now)
    print("scan:", issued.checkin_url)

    token = issued.session.current_token
    record = container.checkin_service.check_in(student, token, now=now + timedelta(seconds=5))
    print("checked in:", record.status.value, record.day_key)


if __name__ == "__main__":
    main()
