"""
Users Module - Black Box Interface

Purpose: Describe the user directory the session service depends on
Interface: UserDirectory, UserRecord
Hidden: User persistence, password hashing

Any user store (SQL, LDAP, remote service) can be plugged in by
implementing these protocols.
"""

from .interfaces import UserDirectory, UserRecord

__all__ = ["UserDirectory", "UserRecord"]
