"""
opencollab - Application Wiring

This is the thin orchestration layer that:
1. Loads configuration
2. Connects the key-value store
3. Builds the session service and installs the session middleware

Route handlers are mounted by the embedding application; the only route
defined here is the unauthenticated health check.
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request

from opencollab.config.provider import ConfigProvider, EnvConfigProvider
from opencollab.logging_config import setup_logging
from opencollab.modules.middleware import create_session_middleware
from opencollab.modules.session import SessionFactory
from opencollab.modules.storage import StorageModule
from opencollab.modules.users import UserDirectory

logger = logging.getLogger(__name__)


def create_app(
    directory: UserDirectory,
    config_provider: Optional[ConfigProvider] = None,
    skip_paths: Optional[Dict[str, list]] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        directory: User directory used for password logins
        config_provider: Configuration source (environment by default)
        skip_paths: Extra {path: [methods]} reachable without a session

    Returns:
        FastAPI app with app.state.session_service set once started
    """
    config_provider = config_provider or EnvConfigProvider()
    setup_logging(config_provider.get_log_config().level)

    storage = StorageModule(config_provider.get_redis_config())
    session_config = config_provider.get_session_config()
    public_paths = {"/health": ["GET"], **(skip_paths or {})}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting opencollab session service...")

        redis_client = await storage.connect()
        session_service = SessionFactory.build(config_provider, redis_client, directory)
        app.state.session_service = session_service
        app.state.session_auth = create_session_middleware(
            session_service,
            skip_paths=public_paths,
            token_header=session_config.token_header,
        )

        logger.info("opencollab session service started")

        yield

        logger.info("Shutting down opencollab session service...")
        await storage.disconnect()

    app = FastAPI(title="opencollab sessions", lifespan=lifespan)

    @app.middleware("http")
    async def session_auth(request: Request, call_next):
        return await request.app.state.session_auth(request, call_next)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
