from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    """Repository interface for class sessions.

    Every mutating method is a single atomic write scoped to one session, so
    concurrent Start/Refresh calls leave exactly one valid token.
    """

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
        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[Session]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[Session]:
        """Newest first."""

        raise NotImplementedError

    def activate(self, session_id: int, *, token: str, token_expires_at: datetime, now: datetime) -> Optional[Session]:
        """Mark active and install a token; start_time is written only when unset.

        Returns None when the session is expired (state or deadline) at write time.
        """

        raise NotImplementedError

    def rotate_token(self, session_id: int, *, token: str, token_expires_at: datetime) -> Optional[Session]:
        """Replace the token of an active session. Returns None if it is no longer active."""

        raise NotImplementedError

    def deactivate(self, session_id: int, *, now: datetime) -> Optional[Session]:
        """Stop an active session. Returns None if it was not active."""

        raise NotImplementedError

    def expire_active_before(self, now: datetime, *, teacher_id: Optional[int] = None) -> int:
        raise NotImplementedError
