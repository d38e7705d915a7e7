"""
Error taxonomy for the session service.

User-facing errors carry messages that are safe to return to clients.
Infrastructure errors are logged with full context and surfaced to clients
only as a generic failure.
"""

from typing import Optional


class OpenCollabError(Exception):
    """Base class for all errors raised by opencollab."""


class UserFacingError(OpenCollabError):
    """Errors whose message may be shown to the end client."""


class InvalidSessionToken(UserFacingError):
    """Raised when a session token is absent, expired or revoked."""

    def __init__(self, message: str = "Invalid session token") -> None:
        super().__init__(message)


class AuthenticationFailed(UserFacingError):
    """
    Raised when username/email and password do not match.

    Subclasses exist for logging and tests only; both share the same
    message so clients cannot tell which half of the credentials was wrong.
    """

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


class UserNotFound(AuthenticationFailed):
    """No user matches the supplied username or email."""


class WrongPassword(AuthenticationFailed):
    """The user exists but the password comparison failed."""


class InfrastructureError(OpenCollabError):
    """The store, directory or entropy source failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.user_id = user_id

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.user_id is not None:
            parts.append(f"user_id={self.user_id}")
        return " ".join(parts)


class StoreError(InfrastructureError):
    """A key-value store call failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> None:
        super().__init__(message, operation=operation, user_id=user_id)
        self.key = key


class StoreConflictError(StoreError):
    """A watched key changed before the transaction committed."""


class DirectoryError(InfrastructureError):
    """The user directory lookup or password comparison failed."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        identifier: Optional[str] = None,
    ) -> None:
        super().__init__(message, operation=operation)
        self.identifier = identifier


class TokenGenerationError(InfrastructureError):
    """The secure random source could not produce a token."""
