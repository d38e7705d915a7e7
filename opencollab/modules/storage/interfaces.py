"""Storage interfaces following Black Box Design principles."""
from typing import AsyncContextManager, Optional, Protocol, Set


class StoreTransaction(Protocol):
    """Writes queued inside a store transaction, committed together on exit."""

    def put(self, key: str, value: str, ttl: int) -> None:
        ...

    def add_to_set(self, set_key: str, member: str) -> None:
        ...


class SessionStore(Protocol):
    """
    Protocol for the key-value store backing sessions.

    Every method is a remote call and may raise StoreError; a missing key
    is never an error.
    """

    async def put(self, key: str, value: str, ttl: int) -> None:
        """Write key with expiry after ttl seconds."""
        ...

    async def get(self, key: str) -> Optional[str]:
        """Read key, None if absent or expired."""
        ...

    async def add_to_set(self, set_key: str, member: str) -> None:
        ...

    async def read_set(self, set_key: str) -> Set[str]:
        """Read all members, empty set if absent."""
        ...

    async def remove_from_set(self, set_key: str, *members: str) -> int:
        ...

    async def exists(self, *keys: str) -> int:
        ...

    async def delete_keys(self, *keys: str) -> int:
        """Delete all keys in a single call, returning how many existed."""
        ...

    def transaction(self, watch: str) -> AsyncContextManager[StoreTransaction]:
        """
        Optimistic watch-and-commit.

        Yields a StoreTransaction. Queued writes are applied together when
        the block exits cleanly; StoreConflictError is raised if the watched
        key was modified in the meantime. No retry is attempted.
        """
        ...
