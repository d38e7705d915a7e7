"""
Key naming for session records and the per-user inverted index.

These names are the persisted contract with existing stored state:
    session:<token>:user.id  -> user id, expires with the session
    user:<id>:session.keys   -> set of <token> strings, no expiry

Index members are exactly the <token> part of the primary keys, so either
key can be derived from the other.
"""

from typing import Iterable, List

SESSION_KEY_PREFIX = "session:"
SESSION_KEY_SUFFIX = ":user.id"


def session_key(token: str) -> str:
    """Map a session token to the key holding its user id."""
    return f"{SESSION_KEY_PREFIX}{token}{SESSION_KEY_SUFFIX}"


def index_key(user_id: int) -> str:
    """Map a user id to the set of that user's session tokens."""
    if isinstance(user_id, bool) or not isinstance(user_id, int) or user_id < 0:
        raise ValueError(f"User id must be a non-negative integer, got {user_id!r}")
    return f"user:{user_id}:session.keys"


def token_from_session_key(key: str) -> str:
    """Inverse of session_key()."""
    if not (key.startswith(SESSION_KEY_PREFIX) and key.endswith(SESSION_KEY_SUFFIX)):
        raise ValueError(f"Not a session key: {key!r}")
    token = key[len(SESSION_KEY_PREFIX):-len(SESSION_KEY_SUFFIX)]
    if not token:
        raise ValueError(f"Not a session key: {key!r}")
    return token


def session_keys_for(tokens: Iterable[str]) -> List[str]:
    # Sorted so the DEL command is deterministic
    return [session_key(token) for token in sorted(tokens)]
