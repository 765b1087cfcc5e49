from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    """Append-only attendance ledger.

    `insert` must enforce one record per (student, session, day_key) itself and
    raise DuplicateRecordError on violation, even under concurrent writers.
    """

    def find_by_student_session_day(self, student_id: int, session_id: int, day_key: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: NewAttendance) -> AttendanceRecord:
        raise NotImplementedError

    def list_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        """Chronological."""

        raise NotImplementedError

    def list_by_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        """Most recent first."""

        raise NotImplementedError

    def count_by_session(self, session_id: int) -> int:
        raise NotImplementedError
