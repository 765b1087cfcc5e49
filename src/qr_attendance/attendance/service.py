from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..common.datetime_utils import day_key, now_utc, reference_timezone
from ..core.constants import DEFAULT_DAY_KEY_UTC_OFFSET_HOURS, DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import Role
from ..core.exceptions import (
    DuplicateCheckInError,
    DuplicateRecordError,
    SessionInactiveError,
    TokenExpiredError,
    ValidationError,
)
from ..core.identity import Caller, require_role
from ..sessions.model import Session, SessionSummary
from ..sessions.service import SessionService
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, CheckInVerification, NewAttendance
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

ALREADY_CHECKED_IN = "You have already marked attendance for today's session."


class CheckInService:
    """Use case: a student redeems a session token once per session-day."""

    def __init__(
        self,
        sessions: SessionService,
        attendance: AttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
        day_key_tz: timezone | None = None,
    ):
        self._sessions = sessions
        self._attendance = attendance
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_threshold = int(late_threshold_minutes)
        self._tz = day_key_tz or reference_timezone(DEFAULT_DAY_KEY_UTC_OFFSET_HOURS)

    def _validate(self, token: str, now: datetime) -> Session:
        token = (token or "").strip()
        if not token:
            raise ValidationError("QR token is required.")

        session = self._sessions.resolve(token)
        if not session.is_active:
            raise SessionInactiveError("This session is no longer active.")
        if session.token_expires_at is None or now > session.token_expires_at:
            raise TokenExpiredError("QR code has expired. Ask your teacher to refresh it.")
        return session

    def verify(self, caller: Caller, token: str, *, now: Optional[datetime] = None) -> CheckInVerification:
        require_role(caller, Role.STUDENT)
        now = now or now_utc()
        session = self._validate(token, now)

        existing = self._attendance.find_by_student_session_day(caller.user_id, session.session_id, day_key(now, self._tz))
        return CheckInVerification(
            session=SessionSummary(
                session_id=session.session_id,
                subject=session.subject,
                room=session.room,
                teacher_id=session.teacher_id,
            ),
            already_attended=existing is not None,
        )

    def check_in(
        self,
        caller: Caller,
        token: str,
        *,
        now: Optional[datetime] = None,
        origin: Optional[str] = None,
    ) -> AttendanceRecord:
        require_role(caller, Role.STUDENT)
        now = now or now_utc()
        session = self._validate(token, now)
        today = day_key(now, self._tz)

        if self._attendance.find_by_student_session_day(caller.user_id, session.session_id, today):
            raise DuplicateCheckInError(ALREADY_CHECKED_IN)

        strategy = self._factory.for_checkin(now=now, start_time=session.start_time, late_after_minutes=self._late_threshold)
        decision = strategy.decide_checkin(now=now, start_time=session.start_time)

        try:
            record = self._attendance.insert(
                NewAttendance(
                    student_id=caller.user_id,
                    session_id=session.session_id,
                    day_key=today,
                    checked_in_at=now,
                    status=decision.status,
                    origin=origin,
                )
            )
        except DuplicateRecordError:
            logger.info("concurrent duplicate check-in student=%s session=%s day=%s", caller.user_id, session.session_id, today)
            raise DuplicateCheckInError(ALREADY_CHECKED_IN)

        logger.info(
            "student %s checked in to session %s as %s (day %s)",
            caller.user_id,
            session.session_id,
            record.status.value,
            today,
        )
        return record

    def history(self, caller: Caller) -> List[AttendanceRecord]:
        require_role(caller, Role.STUDENT)
        return list(self._attendance.list_by_student(caller.user_id))
