"""
Wire models for requests received from, and replies published to, the
message queue.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..auth import AuthOutcome


class RequestType(str, Enum):
    """Request types this service answers."""

    AUTHENTICATE_USER = "authenticateUser"
    AUTHORIZE_USER = "authorizeUser"
    REGISTER_USER = "registerUser"
    DELETE_USER_ACCESS_TOKEN = "deleteUserAccessToken"
    REFRESH_USER_ACCESS_TOKEN = "refreshUserAccessToken"


VALID_REQUEST_TYPES = frozenset(t.value for t in RequestType)


def is_valid_request_type(request_type: str) -> bool:
    """Check if the request type is supported by this service."""
    return request_type in VALID_REQUEST_TYPES


class AuthRequest(BaseModel):
    """Request delivered on the auth channel."""

    type: str = Field(..., description="Request type, e.g. authenticateUser")
    data: Dict[str, str] = Field(default_factory=dict, description="Request payload")
    request_key: str = Field(..., min_length=1, description="Sender's key for the reply")


class AuthReply(BaseModel):
    """Reply published on the requester's reply channel."""

    request_key: str
    type: str
    ok: bool
    message: str
    reason: Optional[str] = None
    retryable: bool = False
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(
        cls, request: AuthRequest, outcome: AuthOutcome, data: Optional[Dict[str, Any]] = None
    ) -> "AuthReply":
        return cls(
            request_key=request.request_key,
            type=request.type,
            ok=outcome.ok,
            message=outcome.public_message,
            reason=outcome.public_code,
            retryable=outcome.retryable,
            data=data or {},
        )
