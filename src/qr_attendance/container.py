from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .attendance.factory import AttendanceStrategyFactory
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import CheckInService
from .common.datetime_utils import reference_timezone
from .core.constants import (
    DEFAULT_CHECKIN_BASE_URL,
    DEFAULT_DAY_KEY_UTC_OFFSET_HOURS,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_QR_ROTATION_SECONDS,
    DEFAULT_SESSION_LIFETIME_DAYS,
)
from .database.connection import DBConfig, DatabaseConnection
from .sessions.memory_session_repository import InMemorySessionRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .sessions.token_generator import TokenGenerator


@dataclass(frozen=True)
class Container:
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    session_service: SessionService
    checkin_service: CheckInService


def _build_repositories(settings: Any) -> tuple[SessionRepository, AttendanceRepository]:
    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return InMemorySessionRepository(), InMemoryAttendanceRepository()
    if backend != "mysql":
        raise ValueError(f"Unsupported STORAGE_BACKEND: {backend!r}")

    db_config = getattr(settings, "DB_CONFIG")
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
    )
    conn = DatabaseConnection(config)
    return MySQLSessionRepository(conn), MySQLAttendanceRepository(conn)


def build_container(settings: Any) -> Container:
    sessions_repo, attendance_repo = _build_repositories(settings)

    session_service = SessionService(
        sessions_repo,
        attendance_repo,
        tokens=TokenGenerator(),
        checkin_base_url=str(getattr(settings, "CHECKIN_BASE_URL", DEFAULT_CHECKIN_BASE_URL)),
        rotation_seconds=int(getattr(settings, "QR_ROTATION_SECONDS", DEFAULT_QR_ROTATION_SECONDS)),
        lifetime_days=int(getattr(settings, "SESSION_LIFETIME_DAYS", DEFAULT_SESSION_LIFETIME_DAYS)),
    )
    checkin_service = CheckInService(
        session_service,
        attendance_repo,
        strategy_factory=AttendanceStrategyFactory(),
        late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", DEFAULT_LATE_THRESHOLD_MINUTES)),
        day_key_tz=reference_timezone(int(getattr(settings, "DAY_KEY_UTC_OFFSET_HOURS", DEFAULT_DAY_KEY_UTC_OFFSET_HOURS))),
    )

    return Container(
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        session_service=session_service,
        checkin_service=checkin_service,
    )
