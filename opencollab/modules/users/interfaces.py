"""User directory interfaces following Black Box Design principles."""
from typing import Optional, Protocol


class UserRecord(Protocol):
    """A stored user as seen by authentication."""

    id: int

    def compare_password(self, plaintext: str) -> bool:
        """
        Compare a plaintext password against the stored credential.

        May raise if the stored credential is malformed.
        """
        ...


class UserDirectory(Protocol):
    """Protocol for user lookups."""

    async def find_by_username_or_email(self, identifier: str) -> Optional[UserRecord]:
        """
        Find a user by username or email.

        Returns:
            The matching user, or None if there is none
        """
        ...
