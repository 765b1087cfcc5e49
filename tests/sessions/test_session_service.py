from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from qr_attendance.core.enums import SessionState
from qr_attendance.core.exceptions import (
    AuthorizationError,
    InvalidStateError,
    InvalidTokenError,
    NotFoundError,
    SessionExpiredError,
    ValidationError,
)
from qr_attendance.sessions.service import SessionService


def _assert_token_iff_active(session):
    assert (session.current_token is not None) == session.is_active
    assert session.is_active == (session.state == SessionState.ACTIVE)


def test_create_defaults_expiry_to_210_days(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)

    assert abs((session.expires_at - (fixed_now + timedelta(days=210))).total_seconds()) <= 1
    assert session.state == SessionState.CREATED
    assert session.start_time is None
    _assert_token_iff_active(session)


def test_create_trims_text_and_keeps_explicit_expiry(session_service, teacher, fixed_now):
    deadline = datetime(2026, 6, 30, 0, 0, tzinfo=timezone.utc)
    session = session_service.create(
        teacher, subject="  Physics ", room="  ", description=" Lab ", expires_at=deadline, now=fixed_now
    )

    assert session.subject == "Physics"
    assert session.room is None
    assert session.description == "Lab"
    assert session.expires_at == deadline


def test_create_naive_expiry_is_treated_as_utc(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Art", expires_at=datetime(2026, 5, 1, 12, 0), now=fixed_now)

    assert session.expires_at == datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("subject", ["", "   ", None])
def test_create_rejects_empty_subject(session_service, teacher, fixed_now, subject):
    with pytest.raises(ValidationError):
        session_service.create(teacher, subject=subject, now=fixed_now)


def test_create_requires_teacher_role(session_service, student, fixed_now):
    with pytest.raises(AuthorizationError):
        session_service.create(student, subject="Algebra", now=fixed_now)


def test_start_issues_token_and_checkin_url(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)

    issued = session_service.start(teacher, session.session_id, now=fixed_now)

    assert issued.session.is_active
    assert issued.session.state == SessionState.ACTIVE
    assert issued.session.start_time == fixed_now
    assert issued.session.token_expires_at == fixed_now + timedelta(seconds=60)
    assert len(issued.session.current_token) == 40
    assert issued.checkin_url == f"http://school.test/checkin?token={issued.session.current_token}"
    assert issued.expires_in == 60
    _assert_token_iff_active(issued.session)


def test_start_twice_keeps_start_time_and_rotates_token(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)
    first = session_service.start(teacher, session.session_id, now=fixed_now)

    second = session_service.start(teacher, session.session_id, now=fixed_now + timedelta(seconds=5))

    assert second.session.start_time == first.session.start_time
    assert second.session.current_token != first.session.current_token
    assert second.session.is_active


def test_start_by_non_owner_is_not_found(session_service, teacher, other_teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)

    with pytest.raises(NotFoundError):
        session_service.start(other_teacher, session.session_id, now=fixed_now)
    with pytest.raises(NotFoundError):
        session_service.start(teacher, 9999, now=fixed_now)


def test_stop_then_restart_before_expiry_then_fail_after(session_service, teacher, fixed_now):
    deadline = fixed_now + timedelta(days=1)
    session = session_service.create(teacher, subject="Algebra", expires_at=deadline, now=fixed_now)
    session_service.start(teacher, session.session_id, now=fixed_now)

    stopped = session_service.stop(teacher, session.session_id, now=fixed_now + timedelta(hours=1))
    assert stopped.state == SessionState.STOPPED
    assert stopped.end_time == fixed_now + timedelta(hours=1)
    assert stopped.token_expires_at is None
    _assert_token_iff_active(stopped)

    restarted = session_service.start(teacher, session.session_id, now=fixed_now + timedelta(hours=2))
    assert restarted.session.is_active
    assert restarted.session.start_time == fixed_now

    session_service.stop(teacher, session.session_id, now=fixed_now + timedelta(hours=3))
    with pytest.raises(SessionExpiredError):
        session_service.start(teacher, session.session_id, now=deadline + timedelta(seconds=1))


def test_start_exactly_at_deadline_is_allowed(session_service, teacher, fixed_now):
    deadline = fixed_now + timedelta(hours=1)
    session = session_service.create(teacher, subject="Algebra", expires_at=deadline, now=fixed_now)

    issued = session_service.start(teacher, session.session_id, now=deadline)

    assert issued.session.is_active


def test_stop_is_idempotent(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)
    session_service.start(teacher, session.session_id, now=fixed_now)
    first = session_service.stop(teacher, session.session_id, now=fixed_now + timedelta(minutes=30))

    again = session_service.stop(teacher, session.session_id, now=fixed_now + timedelta(minutes=45))

    assert again == first


def test_stop_by_non_owner_is_not_found(session_service, teacher, other_teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)

    with pytest.raises(NotFoundError):
        session_service.stop(other_teacher, session.session_id, now=fixed_now)


def test_refresh_requires_active_session(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)

    with pytest.raises(InvalidStateError):
        session_service.refresh_token(teacher, session.session_id, now=fixed_now)

    session_service.start(teacher, session.session_id, now=fixed_now)
    session_service.stop(teacher, session.session_id, now=fixed_now)
    with pytest.raises(InvalidStateError):
        session_service.refresh_token(teacher, session.session_id, now=fixed_now)


def test_refresh_rotates_token_with_sliding_deadline(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)
    started = session_service.start(teacher, session.session_id, now=fixed_now)

    later = fixed_now + timedelta(seconds=75)
    refreshed = session_service.refresh_token(teacher, session.session_id, now=later)

    assert refreshed.session.current_token != started.session.current_token
    assert refreshed.session.token_expires_at == later + timedelta(seconds=60)
    assert refreshed.session.token_expires_at > later
    assert refreshed.session.start_time == fixed_now


def test_refresh_regenerates_when_generator_repeats(sessions_repo, attendance_repo, teacher, fixed_now):
    class RepeatingTokens:
        def __init__(self):
            self._values = iter(["a" * 40, "a" * 40, "b" * 40])

        def generate(self):
            return next(self._values)

    svc = SessionService(sessions_repo, attendance_repo, tokens=RepeatingTokens())
    session = svc.create(teacher, subject="Algebra", now=fixed_now)
    svc.start(teacher, session.session_id, now=fixed_now)

    refreshed = svc.refresh_token(teacher, session.session_id, now=fixed_now)

    assert refreshed.session.current_token == "b" * 40


def test_old_token_no_longer_resolves_after_refresh(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)
    old = session_service.start(teacher, session.session_id, now=fixed_now).session.current_token
    new = session_service.refresh_token(teacher, session.session_id, now=fixed_now).session.current_token

    assert session_service.resolve(new).session_id == session.session_id
    with pytest.raises(InvalidTokenError):
        session_service.resolve(old)


def test_sweep_expires_only_sessions_past_deadline(session_service, teacher, fixed_now):
    past = session_service.create(teacher, subject="Old", expires_at=fixed_now + timedelta(hours=1), now=fixed_now)
    boundary = session_service.create(teacher, subject="Edge", expires_at=fixed_now + timedelta(hours=2), now=fixed_now)
    future = session_service.create(teacher, subject="New", now=fixed_now)
    for s in (past, boundary, future):
        session_service.start(teacher, s.session_id, now=fixed_now)

    sweep_at = fixed_now + timedelta(hours=2)
    assert session_service.sweep_expired(now=sweep_at) == 1

    expired = session_service.get_detail(teacher, past.session_id, now=sweep_at).session
    assert expired.state == SessionState.EXPIRED
    assert expired.end_time == sweep_at
    _assert_token_iff_active(expired)

    assert session_service.get_detail(teacher, boundary.session_id, now=sweep_at).session.is_active
    assert session_service.get_detail(teacher, future.session_id, now=sweep_at).session.is_active


def test_expired_session_can_never_restart(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Old", expires_at=fixed_now + timedelta(hours=1), now=fixed_now)
    session_service.start(teacher, session.session_id, now=fixed_now)
    session_service.sweep_expired(now=fixed_now + timedelta(hours=2))

    with pytest.raises(SessionExpiredError):
        session_service.start(teacher, session.session_id, now=fixed_now + timedelta(hours=2))


def test_list_for_teacher_sweeps_and_counts(session_service, teacher, other_teacher, fixed_now):
    first = session_service.create(teacher, subject="Algebra", expires_at=fixed_now + timedelta(minutes=5), now=fixed_now)
    second = session_service.create(teacher, subject="Biology", now=fixed_now + timedelta(seconds=1))
    session_service.create(other_teacher, subject="Chemistry", now=fixed_now)
    session_service.start(teacher, first.session_id, now=fixed_now)

    overviews = session_service.list_for_teacher(teacher, now=fixed_now + timedelta(minutes=10))

    assert [o.session.session_id for o in overviews] == [second.session_id, first.session_id]
    assert overviews[1].session.state == SessionState.EXPIRED
    assert all(o.attendance_count == 0 for o in overviews)


def test_get_detail_sweeps_past_deadline_sessions(session_service, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", expires_at=fixed_now + timedelta(minutes=5), now=fixed_now)
    session_service.start(teacher, session.session_id, now=fixed_now)

    detail = session_service.get_detail(teacher, session.session_id, now=fixed_now + timedelta(minutes=10))

    assert detail.session.state == SessionState.EXPIRED
    _assert_token_iff_active(detail.session)


def test_concurrent_start_and_refresh_leave_one_valid_token(session_service, sessions_repo, teacher, fixed_now):
    session = session_service.create(teacher, subject="Algebra", now=fixed_now)
    session_service.start(teacher, session.session_id, now=fixed_now)

    issued: list[str] = []
    lock = threading.Lock()
    barrier = threading.Barrier(10)

    def rotate(use_start: bool):
        barrier.wait()
        if use_start:
            result = session_service.start(teacher, session.session_id, now=fixed_now)
        else:
            result = session_service.refresh_token(teacher, session.session_id, now=fixed_now)
        with lock:
            issued.append(result.session.current_token)

    threads = [threading.Thread(target=rotate, args=(i % 2 == 0,)) for i in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    resolvable = []
    for token in issued:
        try:
            session_service.resolve(token)
        except InvalidTokenError:
            continue
        resolvable.append(token)

    stored = sessions_repo.get_by_id(session.session_id)
    assert len(issued) == 10
    assert resolvable == [stored.current_token]
    assert stored.is_active
