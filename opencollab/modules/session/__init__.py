"""
Session Module - Black Box Interface

Purpose: Manage login session token lifecycle
Interface: authenticate_user(), create_session(), authenticate_session(),
           invalidate_sessions(), revoke_session(), list_sessions(), prune_sessions()
Hidden: Token format, key naming, inverted index maintenance, TTL handling

Replaceable with any session backend implementing the same operations.
"""

from .factory import SessionFactory
from .keys import index_key, session_key
from .service import SessionService
from .tokens import new_token

__all__ = ["SessionFactory", "SessionService", "index_key", "new_token", "session_key"]
