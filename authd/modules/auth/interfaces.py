"""Request outcome types following Black Box Design principles."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    """States a single auth request moves through."""

    RECEIVED = "received"
    AUTHENTICATING = "authenticating"
    MINTING = "minting"
    PERSISTING = "persisting"
    DECODING = "decoding"
    LOOKING_UP = "looking_up"
    REVOKING = "revoking"
    COMPLETED = "completed"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Why a request ended in FAILED."""

    INVALID_USER = "invalid_user"
    INVALID_PASSWORD = "invalid_password"
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    MISSING_TOKEN = "missing_token"
    STORE_UNAVAILABLE = "store_unavailable"
    AUTH_ERROR = "auth_error"
    BAD_REQUEST = "bad_request"
    UNSUPPORTED = "unsupported"


# (code, message) shown to callers; credential failures are never distinguished
_PUBLIC_ERRORS = {
    FailureReason.INVALID_USER: ("authentication_failed", "authentication failed"),
    FailureReason.INVALID_PASSWORD: ("authentication_failed", "authentication failed"),
    FailureReason.MALFORMED: ("unauthorized", "unauthorized"),
    FailureReason.INVALID_SIGNATURE: ("unauthorized", "unauthorized"),
    FailureReason.EXPIRED: ("unauthorized", "unauthorized"),
    FailureReason.NOT_FOUND: ("unauthorized", "unauthorized"),
    FailureReason.MISSING_TOKEN: ("unauthorized", "unauthorized"),
    FailureReason.STORE_UNAVAILABLE: ("unavailable", "service unavailable, retry later"),
    FailureReason.AUTH_ERROR: ("auth_error", "error performing auth"),
    FailureReason.BAD_REQUEST: ("bad_request", "bad request"),
    FailureReason.UNSUPPORTED: ("unsupported", "unsupported request type"),
}
_DEFAULT_ERROR = ("auth_error", "error performing auth")


@dataclass
class AuthOutcome:
    """Terminal result of an auth request."""
    state: RequestState
    result: Any = None
    reason: Optional[FailureReason] = None
    retryable: bool = False
    error: Optional[str] = None
    trace: List[RequestState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == RequestState.COMPLETED

    @property
    def public_code(self) -> Optional[str]:
        """Error code safe to return to the caller."""
        if self.ok:
            return None
        return _PUBLIC_ERRORS.get(self.reason, _DEFAULT_ERROR)[0]

    @property
    def public_message(self) -> str:
        """Message safe to return to the caller."""
        if self.ok:
            return "ok"
        return _PUBLIC_ERRORS.get(self.reason, _DEFAULT_ERROR)[1]


class RequestFlow:
    """
    Tracks one request through its states and builds its outcome.

    A flow starts in RECEIVED and ends exactly once, in COMPLETED or FAILED.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.trace: List[RequestState] = [RequestState.RECEIVED]

    @property
    def state(self) -> RequestState:
        return self.trace[-1]

    def advance(self, state: RequestState) -> None:
        self.trace.append(state)

    def complete(self, result: Any) -> AuthOutcome:
        last = self.state
        self.trace.append(RequestState.COMPLETED)
        logger.debug(f"{self.operation} completed after {last.value}")
        return AuthOutcome(state=RequestState.COMPLETED, result=result, trace=list(self.trace))

    def fail(
        self,
        reason: FailureReason,
        error: Optional[str] = None,
        retryable: bool = False,
    ) -> AuthOutcome:
        failed_in = self.state
        self.trace.append(RequestState.FAILED)
        logger.warning(
            f"{self.operation} failed in {failed_in.value}: {reason.value}"
            + (f" ({error})" if error else "")
        )
        return AuthOutcome(
            state=RequestState.FAILED,
            reason=reason,
            retryable=retryable,
            error=error,
            trace=list(self.trace),
        )
