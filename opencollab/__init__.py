"""
opencollab - Session Service

Issues, validates and revokes opaque session tokens backed by Redis.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- session: Token generation, session lifecycle, inverted index
- storage: Key-value store abstraction (Redis, in-memory)
- users: User directory protocols
- middleware: FastAPI request gating on session tokens
"""

__version__ = "1.0.0"
