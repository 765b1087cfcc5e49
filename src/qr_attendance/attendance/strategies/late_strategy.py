from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision, minutes_between


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide_checkin(self, *, now: datetime, start_time: Optional[datetime]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, minutes_since_start=minutes_between(start_time, now))
