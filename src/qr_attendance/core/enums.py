from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller role resolved upstream by the authentication layer."""

    TEACHER = "teacher"
    STUDENT = "student"


class SessionState(str, Enum):
    """Lifecycle state of a class session."""

    CREATED = "CREATED"
    ACTIVE = "ACTIVE"
    STOPPED = "STOPPED"
    EXPIRED = "EXPIRED"


class AttendanceStatus(str, Enum):
    """Check-in classification stored with each record."""

    PRESENT = "present"
    LATE = "late"
