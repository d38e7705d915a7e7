"""
In-memory SessionStore for tests and local development.

Expiry is evaluated lazily against an injectable clock, so tests can
advance time without sleeping.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional, Set, Tuple

from opencollab.errors import StoreConflictError


class MemoryTransaction:
    def __init__(self):
        self.operations: List[Tuple[str, tuple]] = []

    def put(self, key: str, value: str, ttl: int) -> None:
        self.operations.append(("put", (key, value, ttl)))

    def add_to_set(self, set_key: str, member: str) -> None:
        self.operations.append(("add_to_set", (set_key, member)))


class MemorySessionStore:
    """Dict-backed store honouring the SessionStore contract."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._values: Dict[str, Tuple[str, Optional[float]]] = {}
        self._sets: Dict[str, Set[str]] = {}
        # Write counters exist only for keys an open transaction watches
        self._watchers: Dict[str, int] = {}
        self._versions: Dict[str, int] = {}

    def _touch(self, key: str) -> None:
        if key in self._watchers:
            self._versions[key] = self._versions.get(key, 0) + 1

    def _expire(self, key: str) -> None:
        entry = self._values.get(key)
        if entry is None:
            return
        _, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._values[key]
            self._touch(key)

    def _put(self, key: str, value: str, ttl: int) -> None:
        self._sets.pop(key, None)
        self._values[key] = (value, self._clock() + ttl)
        self._touch(key)

    def _add_to_set(self, set_key: str, member: str) -> None:
        self._sets.setdefault(set_key, set()).add(member)
        self._touch(set_key)

    def keys(self) -> List[str]:
        """All live keys, for test assertions."""
        for key in list(self._values):
            self._expire(key)
        return sorted(list(self._values) + list(self._sets))

    async def put(self, key: str, value: str, ttl: int) -> None:
        self._put(key, value, ttl)

    async def get(self, key: str) -> Optional[str]:
        self._expire(key)
        entry = self._values.get(key)
        return entry[0] if entry else None

    async def add_to_set(self, set_key: str, member: str) -> None:
        self._add_to_set(set_key, member)

    async def read_set(self, set_key: str) -> Set[str]:
        return set(self._sets.get(set_key, ()))

    async def remove_from_set(self, set_key: str, *members: str) -> int:
        current = self._sets.get(set_key)
        if not current:
            return 0
        removed = 0
        for member in members:
            if member in current:
                current.discard(member)
                removed += 1
        if not current:
            del self._sets[set_key]
        if removed:
            self._touch(set_key)
        return removed

    async def exists(self, *keys: str) -> int:
        count = 0
        for key in keys:
            self._expire(key)
            if key in self._values or key in self._sets:
                count += 1
        return count

    async def delete_keys(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            self._expire(key)
            if self._values.pop(key, None) is not None or self._sets.pop(key, None) is not None:
                deleted += 1
                self._touch(key)
        return deleted

    @asynccontextmanager
    async def transaction(self, watch: str) -> AsyncIterator[MemoryTransaction]:
        self._expire(watch)
        self._watchers[watch] = self._watchers.get(watch, 0) + 1
        version = self._versions.get(watch, 0)
        try:
            tx = MemoryTransaction()
            yield tx

            self._expire(watch)
            if self._versions.get(watch, 0) != version:
                raise StoreConflictError(
                    "Watched key modified during transaction", operation="transaction", key=watch
                )
            # No await between the check and the writes, so they land together
            for name, args in tx.operations:
                if name == "put":
                    self._put(*args)
                else:
                    self._add_to_set(*args)
        finally:
            self._watchers[watch] -= 1
            if not self._watchers[watch]:
                del self._watchers[watch]
                self._versions.pop(watch, None)
