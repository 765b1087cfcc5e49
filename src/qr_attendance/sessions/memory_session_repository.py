from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Sequence

from ..core.enums import SessionState
from .model import Session
from .repository import SessionRepository


class InMemorySessionRepository(SessionRepository):
    """Process-local store used by the "memory" backend and the test-suite."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_id: Dict[int, Session] = {}
        self._id = 0

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
        with self._lock:
            self._id += 1
            session = Session(
                session_id=self._id,
                teacher_id=int(teacher_id),
                subject=subject,
                room=room,
                description=description,
                state=SessionState.CREATED,
                is_active=False,
                start_time=None,
                end_time=None,
                expires_at=expires_at,
                current_token=None,
                token_expires_at=None,
                created_at=created_at,
            )
            self._by_id[session.session_id] = session
            return session

    def get_by_id(self, session_id: int) -> Optional[Session]:
        return self._by_id.get(int(session_id))

    def get_by_token(self, token: str) -> Optional[Session]:
        with self._lock:
            for s in self._by_id.values():
                if s.current_token is not None and s.current_token == token:
                    return s
        return None

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        with self._lock:
            items = [s for s in self._by_id.values() if s.teacher_id == int(teacher_id)]
        items.sort(key=lambda s: (s.created_at, s.session_id), reverse=True)
        return items

    def activate(self, session_id: int, *, token: str, token_expires_at: datetime, now: datetime) -> Optional[Session]:
        with self._lock:
            s = self._by_id.get(int(session_id))
            if not s or s.state == SessionState.EXPIRED or s.expires_at < now:
                return None
            s = replace(
                s,
                is_active=True,
                state=SessionState.ACTIVE,
                start_time=s.start_time or now,
                current_token=token,
                token_expires_at=token_expires_at,
            )
            self._by_id[s.session_id] = s
            return s

    def rotate_token(self, session_id: int, *, token: str, token_expires_at: datetime) -> Optional[Session]:
        with self._lock:
            s = self._by_id.get(int(session_id))
            if not s or not s.is_active:
                return None
            s = replace(s, current_token=token, token_expires_at=token_expires_at)
            self._by_id[s.session_id] = s
            return s

    def deactivate(self, session_id: int, *, now: datetime) -> Optional[Session]:
        with self._lock:
            s = self._by_id.get(int(session_id))
            if not s or not s.is_active:
                return None
            s = replace(
                s,
                is_active=False,
                state=SessionState.STOPPED,
                end_time=now,
                current_token=None,
                token_expires_at=None,
            )
            self._by_id[s.session_id] = s
            return s

    def expire_active_before(self, now: datetime, *, teacher_id: Optional[int] = None) -> int:
        count = 0
        with self._lock:
            for sid, s in list(self._by_id.items()):
                if not s.is_active or not s.expires_at < now:
                    continue
                if teacher_id is not None and s.teacher_id != int(teacher_id):
                    continue
                self._by_id[sid] = replace(
                    s,
                    is_active=False,
                    state=SessionState.EXPIRED,
                    end_time=s.end_time or now,
                    current_token=None,
                    token_expires_at=None,
                )
                count += 1
        return count
