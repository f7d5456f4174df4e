"""
Error types shared across authd modules.

Modules raise these; the auth coordinator converts them into explicit
request outcomes so that no failure here terminates the service.
"""

from typing import Any, Dict, Optional


class AuthdError(Exception):
    """Base class for all authd errors."""

    def __init__(self, message: str, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail or {}


# Token errors


class TokenError(AuthdError):
    """A token could not be encoded or decoded."""


class MalformedToken(TokenError):
    """Token string cannot be parsed into the expected claim shape."""


class InvalidSignature(TokenError):
    """Signature does not verify or the signing algorithm is not HS256."""


class TokenExpired(TokenError):
    """The token's embedded expiration has elapsed."""


class TokenEncodeError(TokenError):
    """Claims could not be serialized and signed."""


# Ledger errors


class LedgerError(AuthdError):
    """Session ledger operation failed."""


class SessionNotFound(LedgerError):
    """No live session entry exists for the token id."""


class StoreUnavailable(LedgerError):
    """The backing store could not be reached or refused the operation."""


# User store errors


class UserNotFound(AuthdError):
    """No user record matches the lookup."""


class UserExists(AuthdError):
    """A user record with the same email already exists."""


__all__ = [
    "AuthdError",
    "TokenError",
    "MalformedToken",
    "InvalidSignature",
    "TokenExpired",
    "TokenEncodeError",
    "LedgerError",
    "SessionNotFound",
    "StoreUnavailable",
    "UserNotFound",
    "UserExists",
]
