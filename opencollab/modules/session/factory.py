"""
Session Factory following Black Box Design principles.

This factory:
- Builds the store adapter around the injected Redis client
- Wires the user directory and configuration into the service
- Returns only the service facade
"""

import logging
from typing import Any, Optional

from opencollab.config.provider import ConfigProvider
from opencollab.modules.storage import MemorySessionStore, RedisSessionStore
from opencollab.modules.users import UserDirectory

from .service import SessionService

logger = logging.getLogger(__name__)


class SessionFactory:
    """Composition root for the session stack."""

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Any,
        directory: UserDirectory,
    ) -> SessionService:
        """
        Build the session service on top of Redis.

        Args:
            config_provider: Configuration provider
            redis_client: Connected async Redis client (see StorageModule)
            directory: User directory for credential checks

        Returns:
            SessionService
        """
        session_config = config_provider.get_session_config()

        logger.info(f"Building session service with TTL {session_config.ttl_seconds}s")
        return SessionService(
            store=RedisSessionStore(redis_client),
            directory=directory,
            session_ttl=session_config.ttl_seconds,
        )

    @staticmethod
    def build_for_testing(
        directory: UserDirectory,
        store: Optional[Any] = None,
        session_ttl: Optional[int] = None,
    ) -> SessionService:
        """
        Build the session service over an in-memory store.

        Args:
            directory: User directory (usually a fake)
            store: Store to use instead of a fresh MemorySessionStore
            session_ttl: Optional TTL override in seconds

        Returns:
            SessionService for testing
        """
        kwargs = {}
        if session_ttl is not None:
            kwargs["session_ttl"] = session_ttl
        return SessionService(store=store or MemorySessionStore(), directory=directory, **kwargs)
