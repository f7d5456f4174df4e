"""
Users Module - Black Box Interface

Purpose: Read-only user lookup for authentication
Interface: find_by_email(), save()
Hidden: Record layout, password hashing on the write path

Replaceable with any user record backend (relational database, directory service).
"""

from .interfaces import UserRecordStore
from .models import NewUser, UserRecord
from .store import MemoryUserStore, RedisUserStore

__all__ = ["MemoryUserStore", "NewUser", "RedisUserStore", "UserRecord", "UserRecordStore"]
