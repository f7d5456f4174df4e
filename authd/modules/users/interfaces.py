"""User store interfaces following Black Box Design principles."""
from typing import Protocol

from .models import NewUser, UserRecord


class UserRecordStore(Protocol):
    """Protocol for user record stores - allows swappable implementations."""

    async def find_by_email(self, email: str) -> UserRecord:
        """
        Look up a user by email.

        Raises:
            UserNotFound: If no record matches
        """
        ...

    async def save(self, new_user: NewUser) -> UserRecord:
        """
        Persist a user record, hashing the plaintext password if present.

        Returns:
            The stored record
        """
        ...
