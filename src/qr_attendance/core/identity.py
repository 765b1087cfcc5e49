from __future__ import annotations

from dataclasses import dataclass

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Caller:
    """Already-authenticated identity handed to services by the web layer."""

    user_id: int
    role: Role


def require_role(caller: Caller, role: Role) -> Caller:
    if caller.role != role:
        raise AuthorizationError("You do not have permission to perform this action.")
    return caller
