from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .strategies.base import AttendanceStrategy, minutes_between
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, start_time: Optional[datetime], late_after_minutes: int) -> AttendanceStrategy:
        elapsed = minutes_between(start_time, now)
        if elapsed is None:
            return PresentStrategy()

        if elapsed > late_after_minutes:
            return LateStrategy()
        return PresentStrategy()
