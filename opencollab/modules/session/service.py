"""
Session service: issues, validates and revokes opaque session tokens.

Each session is stored twice:
    session:<token>:user.id  -> user id, expires after the session TTL
    user:<id>:session.keys   -> set of the user's tokens (inverted index)

The inverted index lets invalidate_sessions() find every token of a user
without scanning the key space. Primary records expire on their own while
their index members stay behind until the next invalidation or prune; such
stale members are harmless because validity is decided by the primary
record alone.

create_session() writes both keys through the store's optimistic
transaction (WATCH on the new primary key, then MULTI/EXEC). That narrows
the window in which a reader could see a primary record without its index
member, but it is not a cross-key ACID guarantee on every backend (e.g.
Redis Cluster with the keys on different shards). Failures are reported to
the caller and never retried here.
"""

import logging
from typing import Callable, List, Optional

from opencollab.config.provider import DEFAULT_SESSION_TTL
from opencollab.errors import (
    DirectoryError,
    InvalidSessionToken,
    StoreConflictError,
    StoreError,
    UserNotFound,
    WrongPassword,
)
from opencollab.modules.storage.interfaces import SessionStore
from opencollab.modules.users.interfaces import UserDirectory, UserRecord

from .keys import index_key, session_key, session_keys_for
from .tokens import new_token

logger = logging.getLogger(__name__)


class SessionService:
    """
    Session lifecycle on top of a SessionStore.

    Holds no mutable state of its own; all coordination happens in the
    store, so one instance can serve many concurrent requests.
    """

    def __init__(
        self,
        store: SessionStore,
        directory: UserDirectory,
        session_ttl: int = DEFAULT_SESSION_TTL,
        token_factory: Callable[[], str] = new_token,
    ):
        """
        Initialize session service.

        Args:
            store: Key-value store holding session records and the index
            directory: User lookup used by authenticate_user()
            session_ttl: Session lifetime in seconds (30 days by default)
            token_factory: Token generator, replaceable in tests
        """
        if session_ttl <= 0:
            raise ValueError(f"session_ttl must be positive, got {session_ttl}")

        self.store = store
        self.directory = directory
        self.session_ttl = session_ttl
        self.token_factory = token_factory

    async def authenticate_user(self, identifier: str, password: str) -> UserRecord:
        """
        Authenticate a user with username or email and a password.

        Does not create a session; call create_session() afterwards.

        Raises:
            UserNotFound: No user matches the identifier
            WrongPassword: The password does not match
            DirectoryError: The directory lookup or comparison failed
        """
        logger.debug(f"Authenticating user {identifier}")

        try:
            user = await self.directory.find_by_username_or_email(identifier)
        except Exception as e:
            logger.error(f"User lookup failed for {identifier}: {e}")
            raise DirectoryError(
                "User lookup failed", operation="authenticate_user", identifier=identifier
            ) from e

        if user is None:
            logger.debug(f"No user matches {identifier}")
            raise UserNotFound()

        try:
            password_match = user.compare_password(password)
        except Exception as e:
            logger.error(f"Error comparing passwords for user {user.id}: {e}")
            raise DirectoryError(
                "Password comparison failed", operation="authenticate_user", identifier=identifier
            ) from e

        if not password_match:
            logger.debug(f"Wrong password for user {user.id}")
            raise WrongPassword()

        logger.debug(f"Passwords match, user {user.id} authenticated")
        return user

    async def create_session(self, user_id: int) -> str:
        """
        Create a session token for a user, valid for session_ttl seconds.

        Logic:
        1. Generate a token
        2. Inside one store transaction watching the new primary key:
           write token -> user id with TTL, then add token to the user's index
        3. Return the token

        Raises:
            TokenGenerationError: The entropy source failed
            StoreConflictError: The primary key changed before commit
            StoreError: Any other store failure
        """
        user_index = index_key(user_id)
        token = self.token_factory()
        primary_key = session_key(token)

        logger.debug(f"Creating session for user {user_id}")

        try:
            async with self.store.transaction(watch=primary_key) as tx:
                tx.put(primary_key, str(user_id), self.session_ttl)
                tx.add_to_set(user_index, token)
        except StoreConflictError as e:
            logger.error(f"Session key collision while creating session for user {user_id}")
            raise StoreConflictError(
                "Session key modified during creation",
                operation="create_session",
                key=e.key,
                user_id=user_id,
            ) from e
        except StoreError as e:
            logger.error(f"Failed to store session for user {user_id}: {e}")
            raise StoreError(
                "Failed to store session", operation="create_session", key=e.key, user_id=user_id
            ) from e

        return token

    async def authenticate_session(self, token: str) -> int:
        """
        Resolve a session token to its user id.

        This is the hot path: a single store read.

        Raises:
            InvalidSessionToken: Token unknown, expired or revoked
            StoreError: The store could not be reached
        """
        value = await self.store.get(session_key(token))

        if value is None:
            logger.debug("Session does not exist")
            raise InvalidSessionToken()

        try:
            return int(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Session record holds a non-integer user id: {value!r}")
            raise StoreError(
                "Corrupt session record", operation="authenticate_session", key=session_key(token)
            ) from e

    async def invalidate_sessions(self, user_id: int) -> int:
        """
        Invalidate (delete) all sessions of a user.

        Logic:
        1. Read the user's inverted index (empty if absent)
        2. Derive the primary keys from the index members
        3. Delete the primary keys and the index in one call

        Members whose record already expired are deleted harmlessly. A session
        created concurrently after step 1 survives; callers needing a hard
        cut-off must serialize with create_session() themselves.

        Returns:
            Number of tokens that were listed in the index
        """
        user_index = index_key(user_id)

        logger.debug(f"Invalidating all sessions of user {user_id}")

        try:
            tokens = await self.store.read_set(user_index)
        except StoreError as e:
            logger.error(f"Failed to get session tokens of user {user_id}: {e}")
            raise StoreError(
                "Failed to read session index",
                operation="invalidate_sessions",
                key=user_index,
                user_id=user_id,
            ) from e

        keys_to_delete = session_keys_for(tokens) + [user_index]

        try:
            await self.store.delete_keys(*keys_to_delete)
        except StoreError as e:
            logger.error(f"Failed to delete session keys of user {user_id}: {e}")
            raise StoreError(
                "Failed to delete sessions",
                operation="invalidate_sessions",
                key=user_index,
                user_id=user_id,
            ) from e

        logger.info(f"Invalidated {len(tokens)} session(s) of user {user_id}")
        return len(tokens)

    async def revoke_session(self, token: str) -> Optional[int]:
        """
        End a single session (logout on one device).

        Returns:
            Owner's user id, or None if the token was already invalid
        """
        primary_key = session_key(token)

        try:
            owner = await self.store.get(primary_key)
        except StoreError as e:
            logger.error(f"Failed to read session owner: {e}")
            raise StoreError("Failed to read session", operation="revoke_session", key=primary_key) from e

        if owner is None:
            return None

        try:
            user_id = int(owner)
        except (TypeError, ValueError) as e:
            raise StoreError("Corrupt session record", operation="revoke_session", key=primary_key) from e

        try:
            await self.store.delete_keys(primary_key)
            await self.store.remove_from_set(index_key(user_id), token)
        except StoreError as e:
            logger.error(f"Failed to revoke session of user {user_id}: {e}")
            raise StoreError(
                "Failed to revoke session",
                operation="revoke_session",
                key=e.key,
                user_id=user_id,
            ) from e

        logger.debug(f"Revoked one session of user {user_id}")
        return user_id

    async def list_sessions(self, user_id: int) -> List[str]:
        """
        Get the user's tokens whose session record still exists.

        Stale index members are filtered out, not removed.
        """
        user_index = index_key(user_id)

        try:
            tokens = await self.store.read_set(user_index)
            active = []
            for token in sorted(tokens):
                if await self.store.exists(session_key(token)):
                    active.append(token)
        except StoreError as e:
            logger.error(f"Failed to list sessions of user {user_id}: {e}")
            raise StoreError(
                "Failed to list sessions",
                operation="list_sessions",
                key=e.key,
                user_id=user_id,
            ) from e

        return active

    async def prune_sessions(self, user_id: int) -> int:
        """
        Remove index members whose session record has expired.

        Should be called periodically. Live sessions are never touched, so
        authorization results are the same before and after.

        Returns:
            Number of stale members removed
        """
        user_index = index_key(user_id)

        try:
            tokens = await self.store.read_set(user_index)

            stale = []
            for token in tokens:
                if not await self.store.exists(session_key(token)):
                    stale.append(token)

            if stale:
                await self.store.remove_from_set(user_index, *stale)
        except StoreError as e:
            logger.error(f"Failed to prune sessions of user {user_id}: {e}")
            raise StoreError(
                "Failed to prune sessions",
                operation="prune_sessions",
                key=e.key,
                user_id=user_id,
            ) from e

        if stale:
            logger.debug(f"Pruned {len(stale)} stale session(s) of user {user_id}")

        return len(stale)
