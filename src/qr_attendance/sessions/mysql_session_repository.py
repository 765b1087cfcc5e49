from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import as_utc, to_db
from ..core.enums import SessionState
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Session
from .repository import SessionRepository

_COLUMNS = """
    session_id, teacher_id, subject, room, description, state, is_active,
    start_time, end_time, expires_at, current_token, token_expires_at, created_at
"""


def _opt_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value else None


def _to_session(r: Dict[str, Any]) -> Session:
    return Session(
        session_id=int(r["session_id"]),
        teacher_id=int(r["teacher_id"]),
        subject=r["subject"],
        room=r.get("room"),
        description=r.get("description"),
        state=SessionState(r["state"]),
        is_active=bool(r["is_active"]),
        start_time=_opt_utc(r.get("start_time")),
        end_time=_opt_utc(r.get("end_time")),
        expires_at=as_utc(r["expires_at"]),
        current_token=r.get("current_token"),
        token_expires_at=_opt_utc(r.get("token_expires_at")),
        created_at=as_utc(r["created_at"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, where: str, params: tuple) -> Optional[Session]:
        cur.execute(f"SELECT {_COLUMNS} FROM class_sessions WHERE {where}", params)
        r = fetchone(cur)
        return _to_session(r) if r else None

    def create(
        self,
        *,
        teacher_id: int,
        subject: str,
        room: Optional[str],
        description: Optional[str],
        expires_at: datetime,
        created_at: datetime,
    ) -> Session:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_sessions(teacher_id, subject, room, description, state, is_active, expires_at, created_at)
                VALUES(%s,%s,%s,%s,%s,0,%s,%s)
                """,
                (
                    int(teacher_id),
                    subject,
                    room,
                    description,
                    SessionState.CREATED.value,
                    to_db(expires_at),
                    to_db(created_at),
                ),
            )
            return self._select_one(cur, "session_id=%s", (int(cur.lastrowid),))

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "session_id=%s", (int(session_id),))

    def get_by_token(self, token: str) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, "current_token=%s", (token,))

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE teacher_id=%s
                ORDER BY created_at DESC, session_id DESC
                """,
                (int(teacher_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def activate(self, session_id: int, *, token: str, token_expires_at: datetime, now: datetime) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET is_active=1,
                    state=%s,
                    start_time=COALESCE(start_time, %s),
                    current_token=%s,
                    token_expires_at=%s
                WHERE session_id=%s AND state<>%s AND expires_at>=%s
                """,
                (
                    SessionState.ACTIVE.value,
                    to_db(now),
                    token,
                    to_db(token_expires_at),
                    int(session_id),
                    SessionState.EXPIRED.value,
                    to_db(now),
                ),
            )
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, "session_id=%s", (int(session_id),))

    def rotate_token(self, session_id: int, *, token: str, token_expires_at: datetime) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET current_token=%s, token_expires_at=%s
                WHERE session_id=%s AND is_active=1
                """,
                (token, to_db(token_expires_at), int(session_id)),
            )
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, "session_id=%s", (int(session_id),))

    def deactivate(self, session_id: int, *, now: datetime) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_sessions
                SET is_active=0, state=%s, end_time=%s, current_token=NULL, token_expires_at=NULL
                WHERE session_id=%s AND is_active=1
                """,
                (SessionState.STOPPED.value, to_db(now), int(session_id)),
            )
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, "session_id=%s", (int(session_id),))

    def expire_active_before(self, now: datetime, *, teacher_id: Optional[int] = None) -> int:
        clauses = ["is_active=1", "expires_at<%s"]
        params: list[object] = [SessionState.EXPIRED.value, to_db(now), to_db(now)]
        if teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(teacher_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE class_sessions
                SET is_active=0, state=%s, end_time=COALESCE(end_time, %s),
                    current_token=NULL, token_expires_at=NULL
                WHERE {where}
                """,
                tuple(params),
            )
            return int(cur.rowcount)
