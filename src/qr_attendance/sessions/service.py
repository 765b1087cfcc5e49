from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import as_utc, now_utc
from ..common.validators import optional_text, require_non_empty
from ..core.constants import (
    DEFAULT_CHECKIN_BASE_URL,
    DEFAULT_QR_ROTATION_SECONDS,
    DEFAULT_SESSION_LIFETIME_DAYS,
)
from ..core.enums import Role, SessionState
from ..core.exceptions import InvalidStateError, InvalidTokenError, NotFoundError, SessionExpiredError
from ..core.identity import Caller, require_role
from .model import IssuedCode, Session, SessionDetail, SessionOverview
from .qr_renderer import build_checkin_url
from .repository import SessionRepository
from .token_generator import TokenGenerator

logger = logging.getLogger(__name__)


class SessionService:
    """Use case: a teacher's class session lifecycle and its rotating QR token.

    State machine: CREATED -> ACTIVE -> STOPPED | EXPIRED. A STOPPED session may
    be started again until its administrative deadline; EXPIRED is final.
    Rotation and expiry are driven by callers (refresh endpoint, listing), the
    service owns no timers.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        tokens: TokenGenerator | None = None,
        checkin_base_url: str = DEFAULT_CHECKIN_BASE_URL,
        rotation_seconds: int = DEFAULT_QR_ROTATION_SECONDS,
        lifetime_days: int = DEFAULT_SESSION_LIFETIME_DAYS,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._tokens = tokens or TokenGenerator()
        self._base_url = checkin_base_url
        self._rotation_seconds = int(rotation_seconds)
        self._lifetime_days = int(lifetime_days)

    @property
    def rotation_seconds(self) -> int:
        return self._rotation_seconds

    def _get_owned(self, caller: Caller, session_id: int) -> Session:
        require_role(caller, Role.TEACHER)
        session = self._sessions.get_by_id(int(session_id))
        if not session or session.teacher_id != caller.user_id:
            raise NotFoundError("Session not found.")
        return session

    def _new_token(self, previous: Optional[str]) -> str:
        token = self._tokens.generate()
        while token == previous:
            token = self._tokens.generate()
        return token

    def _issue(self, session: Session) -> IssuedCode:
        return IssuedCode(
            session=session,
            checkin_url=build_checkin_url(self._base_url, session.current_token or ""),
            expires_in=self._rotation_seconds,
        )

    def create(
        self,
        caller: Caller,
        *,
        subject: str,
        room: Optional[str] = None,
        description: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Session:
        require_role(caller, Role.TEACHER)
        now = now or now_utc()
        subject = require_non_empty(subject, "Subject")

        deadline = as_utc(expires_at) if expires_at else now + timedelta(days=self._lifetime_days)

        session = self._sessions.create(
            teacher_id=caller.user_id,
            subject=subject,
            room=optional_text(room, "Room"),
            description=optional_text(description, "Description"),
            expires_at=deadline,
            created_at=now,
        )
        logger.info("session %s created by teacher %s (expires %s)", session.session_id, caller.user_id, deadline.isoformat())
        return session

    def start(self, caller: Caller, session_id: int, *, now: Optional[datetime] = None) -> IssuedCode:
        now = now or now_utc()
        session = self._get_owned(caller, session_id)

        if session.state == SessionState.EXPIRED or session.is_past_expiry(now):
            raise SessionExpiredError("This session has expired and can no longer be started.")

        updated = self._sessions.activate(
            session.session_id,
            token=self._new_token(session.current_token),
            token_expires_at=now + timedelta(seconds=self._rotation_seconds),
            now=now,
        )
        if updated is None:
            # Swept between the read and the write.
            raise SessionExpiredError("This session has expired and can no longer be started.")

        logger.info("session %s started", session.session_id)
        return self._issue(updated)

    def refresh_token(self, caller: Caller, session_id: int, *, now: Optional[datetime] = None) -> IssuedCode:
        now = now or now_utc()
        session = self._get_owned(caller, session_id)
        if not session.is_active:
            raise InvalidStateError("Session is not active.")

        updated = self._sessions.rotate_token(
            session.session_id,
            token=self._new_token(session.current_token),
            token_expires_at=now + timedelta(seconds=self._rotation_seconds),
        )
        if updated is None:
            raise InvalidStateError("Session is not active.")

        logger.debug("session %s token rotated", session.session_id)
        return self._issue(updated)

    def stop(self, caller: Caller, session_id: int, *, now: Optional[datetime] = None) -> Session:
        now = now or now_utc()
        session = self._get_owned(caller, session_id)
        if not session.is_active:
            return session

        updated = self._sessions.deactivate(session.session_id, now=now)
        if updated is None:
            # Stopped or swept concurrently; report the current row.
            return self._sessions.get_by_id(session.session_id) or session

        logger.info("session %s stopped", session.session_id)
        return updated

    def sweep_expired(self, *, now: Optional[datetime] = None, teacher_id: Optional[int] = None) -> int:
        now = now or now_utc()
        count = self._sessions.expire_active_before(now, teacher_id=teacher_id)
        if count:
            logger.info("auto-expired %d active session(s)", count)
        return count

    def resolve(self, token: str) -> Session:
        session = self._sessions.get_by_token(token) if token else None
        if not session:
            raise InvalidTokenError("Invalid QR code. Please scan again.")
        return session

    def list_for_teacher(self, caller: Caller, *, now: Optional[datetime] = None) -> List[SessionOverview]:
        require_role(caller, Role.TEACHER)
        self.sweep_expired(now=now, teacher_id=caller.user_id)

        return [
            SessionOverview(session=s, attendance_count=self._attendance.count_by_session(s.session_id))
            for s in self._sessions.list_for_teacher(caller.user_id)
        ]

    def get_detail(self, caller: Caller, session_id: int, *, now: Optional[datetime] = None) -> SessionDetail:
        require_role(caller, Role.TEACHER)
        self.sweep_expired(now=now, teacher_id=caller.user_id)
        session = self._get_owned(caller, session_id)
        return SessionDetail(session=session, attendance=tuple(self._attendance.list_by_session(session.session_id)))
