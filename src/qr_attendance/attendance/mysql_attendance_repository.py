from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import as_utc, to_db
from ..core.enums import AttendanceStatus
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        session_id=int(r["session_id"]),
        day_key=str(r["day_key"]),
        checked_in_at=as_utc(r["checked_in_at"]),
        status=AttendanceStatus(r["status"]),
        origin=r.get("origin"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_student_session_day(self, student_id: int, session_id: int, day_key: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, session_id, day_key, checked_in_at, status, origin
                FROM attendance_records
                WHERE student_id=%s AND session_id=%s AND day_key=%s
                """,
                (int(student_id), int(session_id), day_key),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert(self, record: NewAttendance) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(student_id, session_id, day_key, checked_in_at, status, origin)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(record.student_id),
                        int(record.session_id),
                        record.day_key,
                        to_db(record.checked_in_at),
                        record.status.value,
                        record.origin,
                    ),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateRecordError(
                    f"attendance exists for student={record.student_id} session={record.session_id} day={record.day_key}"
                ) from e
            raise

        return AttendanceRecord(
            attendance_id=attendance_id,
            student_id=record.student_id,
            session_id=record.session_id,
            day_key=record.day_key,
            checked_in_at=record.checked_in_at,
            status=record.status,
            origin=record.origin,
        )

    def list_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, session_id, day_key, checked_in_at, status, origin
                FROM attendance_records
                WHERE session_id=%s
                ORDER BY checked_in_at ASC, attendance_id ASC
                """,
                (int(session_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_by_student(self, student_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, session_id, day_key, checked_in_at, status, origin
                FROM attendance_records
                WHERE student_id=%s
                ORDER BY checked_in_at DESC, attendance_id DESC
                """,
                (int(student_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_session(self, session_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM attendance_records WHERE session_id=%s",
                (int(session_id),),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
