"""
Session Authentication Middleware Module - Black Box Interface

Purpose: Gate FastAPI requests on a valid session token
Interface: SessionAuthMiddleware, create_session_middleware()
Hidden: Header extraction, error formatting, error-to-status mapping

Can be used by any FastAPI app or sub-app that needs session authentication.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from opencollab.errors import InfrastructureError, InvalidSessionToken
from opencollab.modules.session.tokens import is_token_shaped

logger = logging.getLogger(__name__)


class SessionAuthMiddleware:
    """
    Authentication middleware resolving session tokens to user ids.

    Looks for the token in:
    1. Authorization: Bearer <token>
    2. The configured session header (X-Session-Token by default)

    On success the user id is stored as request.state.user_id.
    """

    def __init__(
        self,
        session_service,
        header_names: Optional[List[str]] = None,
        skip_paths: Optional[Dict[str, list]] = None,
        log_attempts: bool = True
    ):
        """
        Initialize session authentication middleware.

        Args:
            session_service: SessionService instance with authenticate_session method
            header_names: Headers checked after Authorization (default: X-Session-Token)
            skip_paths: Dict of {path: [methods]} to skip authentication
            log_attempts: Whether to log authentication attempts
        """
        self.session_service = session_service
        self.header_names = header_names or ["X-Session-Token"]
        self.skip_paths = skip_paths or {}
        self.log_attempts = log_attempts

    def should_skip_auth(self, request: Request) -> bool:
        """Check if authentication should be skipped for this request."""
        path = str(request.url.path)
        method = request.method.upper()

        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    def extract_token(self, request: Request) -> Optional[str]:
        """Extract the session token from request headers."""
        auth_header = request.headers.get("authorization", "")
        scheme, _, credentials = auth_header.strip().partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

        # An empty or non-bearer Authorization header falls through
        for header_name in self.header_names:
            token = request.headers.get(header_name, "").strip()
            if token:
                return token
        return None

    def format_error(self, status_code: int, message: str) -> Dict[str, Any]:
        return {
            "error": message,
            "status": status_code
        }

    async def __call__(self, request: Request, call_next):
        """Process the request through session authentication."""
        if self.should_skip_auth(request):
            if self.log_attempts:
                logger.debug(f"Skipping auth for {request.method} {request.url.path}")
            return await call_next(request)

        token = self.extract_token(request)

        if not token:
            if self.log_attempts:
                logger.warning(f"Request to {request.url.path} without session token")
            return JSONResponse(
                status_code=401,
                content=self.format_error(401, "Authentication required: session token not provided")
            )

        try:
            # Garbage never reaches the store
            if not is_token_shaped(token):
                raise InvalidSessionToken()
            user_id = await self.session_service.authenticate_session(token)
        except InvalidSessionToken as e:
            if self.log_attempts:
                logger.warning(f"Rejected session token for {request.url.path}")
            return JSONResponse(
                status_code=401,
                content=self.format_error(401, str(e))
            )
        except InfrastructureError as e:
            logger.error(f"Error during session authentication: {e}")
            return JSONResponse(
                status_code=500,
                content=self.format_error(500, "Internal error during authentication")
            )

        request.state.user_id = user_id
        return await call_next(request)


def create_session_middleware(
    session_service,
    skip_paths: Optional[Dict[str, list]] = None,
    token_header: str = "X-Session-Token"
) -> SessionAuthMiddleware:
    """
    Factory function to create session authentication middleware.

    Args:
        session_service: SessionService instance
        skip_paths: Paths to skip authentication {"/path": ["GET", "POST"]}
        token_header: Header carrying the token when Authorization is absent

    Returns:
        Configured SessionAuthMiddleware instance
    """
    return SessionAuthMiddleware(
        session_service=session_service,
        header_names=[token_header],
        skip_paths=skip_paths
    )


__all__ = [
    "SessionAuthMiddleware",
    "create_session_middleware"
]
