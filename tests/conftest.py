from __future__ import annotations

from datetime import datetime, timezone

import pytest

from qr_attendance.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from qr_attendance.attendance.service import CheckInService
from qr_attendance.common.datetime_utils import reference_timezone
from qr_attendance.core.enums import Role
from qr_attendance.core.identity import Caller
from qr_attendance.sessions.memory_session_repository import InMemorySessionRepository
from qr_attendance.sessions.service import SessionService


@pytest.fixture
def fixed_now() -> datetime:
    # 09:00 in the UTC+8 reference timezone
    return datetime(2026, 2, 2, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def teacher() -> Caller:
    return Caller(user_id=10, role=Role.TEACHER)


@pytest.fixture
def other_teacher() -> Caller:
    return Caller(user_id=11, role=Role.TEACHER)


@pytest.fixture
def student() -> Caller:
    return Caller(user_id=100, role=Role.STUDENT)


@pytest.fixture
def sessions_repo() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def attendance_repo() -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository()


@pytest.fixture
def session_service(sessions_repo, attendance_repo) -> SessionService:
    return SessionService(
        sessions_repo,
        attendance_repo,
        checkin_base_url="http://school.test",
        rotation_seconds=60,
        lifetime_days=210,
    )


@pytest.fixture
def checkin_service(session_service, attendance_repo) -> CheckInService:
    return CheckInService(
        session_service,
        attendance_repo,
        late_threshold_minutes=15,
        day_key_tz=reference_timezone(8),
    )
