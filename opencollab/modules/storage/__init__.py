"""
Storage Module - Black Box Interface

Purpose: Keyed reads/writes with expiration against the key-value store
Interface: StorageModule.connect(), SessionStore protocol, RedisSessionStore, MemorySessionStore
Hidden: Redis specifics, connection pooling, transaction pipelines

Can be replaced with any storage backend implementing SessionStore.
"""

from typing import Optional

import redis.asyncio as redis

from opencollab.config.provider import RedisConfig

from .interfaces import SessionStore, StoreTransaction
from .memory import MemorySessionStore
from .redis_store import RedisSessionStore


class StorageModule:
    """Owns the process-wide Redis connection (connect on startup, disconnect on shutdown)."""

    def __init__(self, config: RedisConfig):
        """Initialize storage with Redis configuration."""
        self.config = config
        self._client: Optional[redis.Redis] = None

    async def connect(self) -> redis.Redis:
        """Get storage connection."""
        if not self._client:
            self._client = redis.from_url(
                self.config.url,
                password=self.config.password,
                socket_timeout=self.config.socket_timeout,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = [
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionStore",
    "StorageModule",
    "StoreTransaction",
]
