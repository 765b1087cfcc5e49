from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..core.enums import SessionState


@dataclass(frozen=True)
class Session:
    """Domain entity: one class-meeting attendance window owned by a teacher."""

    session_id: int
    teacher_id: int
    subject: str
    room: Optional[str]
    description: Optional[str]
    state: SessionState
    is_active: bool
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    expires_at: datetime
    current_token: Optional[str]
    token_expires_at: Optional[datetime]
    created_at: datetime

    def is_past_expiry(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> dict:
        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": self.session_id,
            "teacherId": self.teacher_id,
            "subject": self.subject,
            "room": self.room,
            "description": self.description,
            "state": self.state.value,
            "isActive": self.is_active,
            "startTime": iso(self.start_time),
            "endTime": iso(self.end_time),
            "expiresAt": iso(self.expires_at),
            "qrToken": self.current_token,
            "qrExpiresAt": iso(self.token_expires_at),
            "createdAt": iso(self.created_at),
        }


@dataclass(frozen=True)
class IssuedCode:
    """Result of Start/Refresh: the session plus the URL to render as a QR code."""

    session: Session
    checkin_url: str
    expires_in: int


@dataclass(frozen=True)
class SessionSummary:
    """What a student sees before confirming a check-in."""

    session_id: int
    subject: str
    room: Optional[str]
    teacher_id: int


@dataclass(frozen=True)
class SessionOverview:
    session: Session
    attendance_count: int


@dataclass(frozen=True)
class SessionDetail:
    session: Session
    attendance: Sequence[AttendanceRecord] = field(default_factory=tuple)
