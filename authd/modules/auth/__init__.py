"""
Authentication Module - Black Box Interface

Purpose: Authenticate users and authorize, revoke and refresh their tokens
Interface: authenticate(), authorize(), revoke(), refresh()
Hidden: Password checks, token format, ledger layout

Every operation returns an AuthOutcome; callers never see module exceptions.
"""

from .coordinator import AuthCoordinator, extract_token
from .factory import AuthFactory
from .interfaces import AuthOutcome, FailureReason, RequestState

__all__ = [
    "AuthCoordinator",
    "AuthFactory",
    "AuthOutcome",
    "FailureReason",
    "RequestState",
    "extract_token",
]
