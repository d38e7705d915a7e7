"""
Shared pytest fixtures for opencollab tests.

This module provides common fixtures including:
- Redis mocks for the store adapter tests
- An in-memory store driven by a controllable clock
- Fake user directory for credential checks
"""

from dataclasses import dataclass
from typing import Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from opencollab.modules.session import SessionService
from opencollab.modules.storage import MemorySessionStore


# =============================================================================
# Clock and User Directory Fakes
# =============================================================================

class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakeUser:
    id: int
    username: str
    email: str
    password: str

    def compare_password(self, plaintext: str) -> bool:
        return plaintext == self.password


class FakeDirectory:
    """User directory keyed by username and email."""

    def __init__(self, *users: FakeUser):
        self._users: Dict[str, FakeUser] = {}
        for user in users:
            self._users[user.username] = user
            self._users[user.email] = user
        self.lookups = []

    async def find_by_username_or_email(self, identifier: str) -> Optional[FakeUser]:
        self.lookups.append(identifier)
        return self._users.get(identifier)


@pytest.fixture
def alice():
    return FakeUser(id=42, username="alice", email="alice@example.com", password="correct horse")


@pytest.fixture
def directory(alice):
    return FakeDirectory(alice)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store(clock):
    return MemorySessionStore(clock=clock)


@pytest.fixture
def session_service(memory_store, directory):
    """SessionService over the in-memory store with the default 30 day TTL."""
    return SessionService(memory_store, directory)


# =============================================================================
# Redis Mocking Infrastructure
# =============================================================================

@pytest.fixture
def mock_pipeline():
    """Pipeline double usable as `async with redis.pipeline(...) as pipe`."""
    pipe = MagicMock()
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    pipe.watch = AsyncMock()
    pipe.multi = MagicMock()
    pipe.set = MagicMock()
    pipe.sadd = MagicMock()
    pipe.execute = AsyncMock(return_value=[True, 1])
    return pipe


@pytest.fixture
def mock_redis(mock_pipeline):
    """Create a mock async Redis client."""
    redis = AsyncMock()

    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=0)
    redis.exists = AsyncMock(return_value=0)

    redis.sadd = AsyncMock(return_value=1)
    redis.srem = AsyncMock(return_value=0)
    redis.smembers = AsyncMock(return_value=set())

    redis.pipeline = MagicMock(return_value=mock_pipeline)

    return redis


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring a real Redis"
    )
