from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from ..core.enums import AttendanceStatus

if TYPE_CHECKING:
    from ..sessions.model import SessionSummary


@dataclass(frozen=True)
class NewAttendance:
    """Insert payload for the ledger."""

    student_id: int
    session_id: int
    day_key: str
    checked_in_at: datetime
    status: AttendanceStatus
    origin: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's check-in for a session on a given day."""

    attendance_id: int
    student_id: int
    session_id: int
    day_key: str
    checked_in_at: datetime
    status: AttendanceStatus
    origin: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "studentId": self.student_id,
            "sessionId": self.session_id,
            "attendanceDate": self.day_key,
            "timestamp": self.checked_in_at.isoformat(),
            "status": self.status.value,
            "ipAddress": self.origin,
        }


@dataclass(frozen=True)
class CheckInVerification:
    session: "SessionSummary"
    already_attended: bool
