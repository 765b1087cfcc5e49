from __future__ import annotations

import threading
from typing import Dict, Optional, Sequence, Tuple

from ..core.exceptions import DuplicateRecordError
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_Key = Tuple[int, int, str]


class InMemoryAttendanceRepository(AttendanceRepository):
    """Ledger keyed by (student, session, day_key); insert-if-absent under one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_key: Dict[_Key, AttendanceRecord] = {}
        self._id = 0

    def find_by_student_session_day(self, student_id: int, session_id: int, day_key: str) -> Optional[AttendanceRecord]:
        return self._by_key.get((int(student_id), int(session_id), day_key))

    def insert(self, record: NewAttendance) -> AttendanceRecord:
        key = (int(record.student_id), int(record.session_id), record.day_key)
        with self._lock:
            if key in self._by_key:
                raise DuplicateRecordError(
                    f"attendance exists for student={record.student_id} session={record.session_id} day={record.day_key}"
                )
            self._id += 1
            rec = AttendanceRecord(
                attendance_id=self._id,
                student_id=record.student_id,
                session_id=record.session_id,
                day_key=record.day_key,
                checked_in_at=record.checked_in_at,
                status=record.status,
                origin=record.origin,
            )
            self._by_key[key] = rec
            return rec

    def list_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._by_key.values() if r.session_id == int(session_id)]
        items.sort(key=lambda r: (r.checked_in_at, r.attendance_id))
        return items

    def list_by_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        with self._lock:
            items = [r for r in self._by_key.values() if r.student_id == int(student_id)]
        items.sort(key=lambda r: (r.checked_in_at, r.attendance_id), reverse=True)
        return items

    def count_by_session(self, session_id: int) -> int:
        with self._lock:
            return sum(1 for r in self._by_key.values() if r.session_id == int(session_id))
