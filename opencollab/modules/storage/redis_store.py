"""
Redis implementation of the SessionStore protocol.

All commands go through redis.asyncio, so cancelling the calling task
aborts the in-flight command. Redis errors are wrapped into StoreError
with the failing operation and key attached.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Set

from redis.exceptions import RedisError, WatchError

from opencollab.errors import StoreConflictError, StoreError

logger = logging.getLogger(__name__)


class RedisTransaction:
    """Queues writes on a pipeline that is already in MULTI mode."""

    def __init__(self, pipe):
        self._pipe = pipe

    def put(self, key: str, value: str, ttl: int) -> None:
        self._pipe.set(key, value, ex=ttl)

    def add_to_set(self, set_key: str, member: str) -> None:
        self._pipe.sadd(set_key, member)


class RedisSessionStore:
    """
    Session store backed by a single Redis client.

    Note: Does NOT inherit from SessionStore protocol (uses structural typing).
    """

    def __init__(self, redis_client):
        """
        Initialize store.

        Args:
            redis_client: Async Redis client created with decode_responses=True
        """
        self.redis = redis_client

    async def put(self, key: str, value: str, ttl: int) -> None:
        try:
            await self.redis.set(key, value, ex=ttl)
        except RedisError as e:
            raise StoreError("Failed to write key", operation="put", key=key) from e

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self.redis.get(key)
        except RedisError as e:
            raise StoreError("Failed to read key", operation="get", key=key) from e

    async def add_to_set(self, set_key: str, member: str) -> None:
        try:
            await self.redis.sadd(set_key, member)
        except RedisError as e:
            raise StoreError("Failed to add set member", operation="add_to_set", key=set_key) from e

    async def read_set(self, set_key: str) -> Set[str]:
        try:
            members = await self.redis.smembers(set_key)
        except RedisError as e:
            raise StoreError("Failed to read set", operation="read_set", key=set_key) from e
        return set(members or ())

    async def remove_from_set(self, set_key: str, *members: str) -> int:
        if not members:
            return 0
        try:
            return await self.redis.srem(set_key, *members)
        except RedisError as e:
            raise StoreError(
                "Failed to remove set members", operation="remove_from_set", key=set_key
            ) from e

    async def exists(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return await self.redis.exists(*keys)
        except RedisError as e:
            raise StoreError("Failed to check keys", operation="exists", key=keys[0]) from e

    async def delete_keys(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            # One DEL for all keys; missing keys are ignored by Redis
            return await self.redis.delete(*keys)
        except RedisError as e:
            raise StoreError("Failed to delete keys", operation="delete_keys", key=keys[0]) from e

    @asynccontextmanager
    async def transaction(self, watch: str) -> AsyncIterator[RedisTransaction]:
        """
        WATCH the key, queue writes under MULTI, then EXEC.

        EXEC applies the queued commands all-or-none on a single Redis node.
        Keys living on different cluster shards are not covered; the two
        writes are then only as atomic as the deployment allows.
        """
        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                await pipe.watch(watch)
                pipe.multi()
                yield RedisTransaction(pipe)
                await pipe.execute()
        except WatchError as e:
            logger.warning(f"Watched key changed before commit: {watch}")
            raise StoreConflictError(
                "Watched key modified during transaction", operation="transaction", key=watch
            ) from e
        except RedisError as e:
            raise StoreError("Transaction failed", operation="transaction", key=watch) from e
