class DomainError(Exception):
    """Base exception for business rule violations."""

    http_status = 400


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""

    http_status = 403


class NotFoundError(DomainError):
    """Raised when a session does not exist or is not owned by the caller."""

    http_status = 404


class InvalidStateError(DomainError):
    """Raised when an operation is not valid for the session's current state."""


class SessionExpiredError(DomainError):
    """Raised when a session is past its administrative deadline."""


class InvalidTokenError(DomainError):
    """Raised when a check-in token does not resolve to a session."""


class SessionInactiveError(DomainError):
    """Raised when a token resolves to a session that is not active."""


class TokenExpiredError(DomainError):
    """Raised when a token is used after its rotation deadline."""


class DuplicateCheckInError(DomainError):
    """Raised when the student already checked in for this session today."""

    http_status = 409


class DuplicateRecordError(Exception):
    """Storage-level uniqueness violation raised by attendance ledgers.

    Services translate this into DuplicateCheckInError.
    """
