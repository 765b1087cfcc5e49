from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    minutes_since_start: Optional[float] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a check-in status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, start_time: Optional[datetime]) -> StatusDecision:
        raise NotImplementedError


def minutes_between(start: Optional[datetime], end: datetime) -> Optional[float]:
    if start is None:
        return None
    return (end - start).total_seconds() / 60.0
