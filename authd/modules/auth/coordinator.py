"""
Auth coordinator: authenticate, authorize, revoke and refresh requests.

Each request runs as a small state machine over the injected modules and
always ends in an explicit AuthOutcome; expected failures never raise.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Callable, Optional, Tuple

from ...errors import (
    InvalidSignature,
    MalformedToken,
    SessionNotFound,
    StoreUnavailable,
    TokenError,
    TokenExpired,
    UserNotFound,
)
from ..credentials import CredentialVerifier
from ..ledger import SessionLedger
from ..tokens import AccessDetails, TokenCodec, TokenMinter, TokenRecord
from ..tokens.minter import now_utc
from ..users import UserRecordStore
from .interfaces import AuthOutcome, FailureReason, RequestFlow, RequestState

logger = logging.getLogger(__name__)

_TOKEN_FAILURES = {
    MalformedToken: FailureReason.MALFORMED,
    InvalidSignature: FailureReason.INVALID_SIGNATURE,
    TokenExpired: FailureReason.EXPIRED,
}


def extract_token(header: Optional[str]) -> str:
    """
    Extract the token from an Authorization header value.

    Args:
        header: Raw header, normally "<scheme> <token>"

    Returns:
        The second whitespace-delimited field, or "" unless there are exactly two
    """
    if not header:
        return ""
    parts = header.split()
    if len(parts) == 2:
        return parts[1]
    return ""


def _token_failure(flow: RequestFlow, error: TokenError) -> AuthOutcome:
    reason = _TOKEN_FAILURES.get(type(error), FailureReason.MALFORMED)
    return flow.fail(reason, error=error.message)


class AuthCoordinator:
    """
    Orchestrates credential checks, token minting and the session ledger.

    A token is accepted only when its signature verifies with the secret for
    its kind, its expiration has not elapsed and its ledger entry still exists.
    """

    def __init__(
        self,
        user_store: UserRecordStore,
        verifier: CredentialVerifier,
        minter: TokenMinter,
        codec: TokenCodec,
        ledger: SessionLedger,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.user_store = user_store
        self.verifier = verifier
        self.minter = minter
        self.codec = codec
        self.ledger = ledger
        self.clock = clock

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> AuthOutcome:
        """
        Verify a user's password and issue a recorded token pair.

        Returns:
            COMPLETED with a TokenRecord, or FAILED with the reason
        """
        flow = RequestFlow("authenticate")
        if not email or not password:
            return flow.fail(FailureReason.BAD_REQUEST, error="email and password are required")

        flow.advance(RequestState.AUTHENTICATING)
        try:
            user = await self.user_store.find_by_email(email)
        except UserNotFound:
            await self.verifier.verify_absent_async(password)
            return flow.fail(FailureReason.INVALID_USER)
        except StoreUnavailable as e:
            return flow.fail(FailureReason.STORE_UNAVAILABLE, error=e.message, retryable=True)

        if not await self.verifier.verify_async(user.hashed_credential, password):
            return flow.fail(FailureReason.INVALID_PASSWORD, error=f"user {user.user_id}")

        return await self._issue(flow, user.user_id)

    async def authorize(self, token: Optional[str]) -> AuthOutcome:
        """
        Check an access token against its signature, expiry and ledger entry.

        Returns:
            COMPLETED with the owning identity, or FAILED with the reason
        """
        flow = RequestFlow("authorize")
        if not token:
            return flow.fail(FailureReason.MISSING_TOKEN)

        flow.advance(RequestState.DECODING)
        try:
            details = AccessDetails.from_claims(self.codec.decode_access(token))
        except TokenError as e:
            return _token_failure(flow, e)

        flow.advance(RequestState.LOOKING_UP)
        try:
            owner = await self.ledger.get(details.access_uuid)
        except SessionNotFound:
            return flow.fail(FailureReason.NOT_FOUND, error=f"access {details.access_uuid}")
        except StoreUnavailable as e:
            return flow.fail(FailureReason.STORE_UNAVAILABLE, error=e.message, retryable=True)

        if owner != details.user_id:
            return flow.fail(FailureReason.NOT_FOUND, error="ledger owner does not match token")

        return flow.complete(owner)

    async def revoke(self, token: Optional[str]) -> AuthOutcome:
        """
        Revoke an access token by deleting its ledger entry.

        Returns:
            COMPLETED with the number of entries removed (0 if already revoked)
        """
        flow = RequestFlow("revoke")
        if not token:
            return flow.fail(FailureReason.MISSING_TOKEN)

        flow.advance(RequestState.DECODING)
        try:
            details = AccessDetails.from_claims(self.codec.decode_access(token))
        except TokenError as e:
            return _token_failure(flow, e)

        flow.advance(RequestState.REVOKING)
        try:
            removed = await self.ledger.delete(details.access_uuid)
        except StoreUnavailable as e:
            return flow.fail(FailureReason.STORE_UNAVAILABLE, error=e.message, retryable=True)

        logger.info(f"Revoked access token {details.access_uuid} (removed={removed})")
        return flow.complete(removed)

    async def refresh(self, refresh_token: Optional[str]) -> AuthOutcome:
        """
        Exchange a live refresh token for a new token pair.

        The presented refresh token is revoked once the new pair is recorded,
        so each refresh token can be used at most once and survives a failed
        write.

        Returns:
            COMPLETED with a new TokenRecord, or FAILED with the reason
        """
        flow = RequestFlow("refresh")
        if not refresh_token:
            return flow.fail(FailureReason.MISSING_TOKEN)

        flow.advance(RequestState.DECODING)
        try:
            claims = self.codec.decode_refresh(refresh_token)
        except TokenError as e:
            return _token_failure(flow, e)

        flow.advance(RequestState.LOOKING_UP)
        try:
            owner = await self.ledger.get(claims.refresh_uuid)
        except SessionNotFound:
            return flow.fail(FailureReason.NOT_FOUND, error=f"refresh {claims.refresh_uuid}")
        except StoreUnavailable as e:
            return flow.fail(FailureReason.STORE_UNAVAILABLE, error=e.message, retryable=True)

        if owner != claims.user_id:
            return flow.fail(FailureReason.NOT_FOUND, error="ledger owner does not match token")

        # The presented entry is removed only once the new pair is recorded
        record, failure = await self._record_pair(flow, owner)
        if failure is not None:
            return failure

        flow.advance(RequestState.REVOKING)
        try:
            removed = await self.ledger.delete(claims.refresh_uuid)
        except StoreUnavailable as e:
            await self._discard(record)
            return flow.fail(FailureReason.STORE_UNAVAILABLE, error=e.message, retryable=True)

        # Lost a race with a concurrent refresh of the same token
        if removed == 0:
            await self._discard(record)
            return flow.fail(FailureReason.NOT_FOUND, error=f"refresh {claims.refresh_uuid} already used")

        logger.info(f"Rotated refresh token {claims.refresh_uuid} for user {owner}")
        return flow.complete(record)

    async def authorize_header(self, header: Optional[str]) -> AuthOutcome:
        return await self.authorize(extract_token(header))

    async def revoke_header(self, header: Optional[str]) -> AuthOutcome:
        return await self.revoke(extract_token(header))

    async def _issue(self, flow: RequestFlow, user_id: str) -> AuthOutcome:
        record, failure = await self._record_pair(flow, user_id)
        if failure is not None:
            return failure

        logger.info(f"Issued token pair for user {user_id}")
        return flow.complete(record)

    async def _record_pair(
        self, flow: RequestFlow, user_id: str
    ) -> Tuple[Optional[TokenRecord], Optional[AuthOutcome]]:
        """Mint a token pair and record both ids; never hand out unrecorded tokens."""
        flow.advance(RequestState.MINTING)
        try:
            record = self.minter.mint(user_id)
        except TokenError as e:
            return None, flow.fail(FailureReason.AUTH_ERROR, error=e.message)

        flow.advance(RequestState.PERSISTING)
        try:
            await self._persist(record, user_id)
        except StoreUnavailable as e:
            return None, flow.fail(FailureReason.AUTH_ERROR, error=e.message, retryable=True)
        except ValueError as e:
            return None, flow.fail(FailureReason.AUTH_ERROR, error=str(e))

        return record, None

    async def _discard(self, record: TokenRecord) -> None:
        for token_id in (record.access_uuid, record.refresh_uuid):
            try:
                await self.ledger.delete(token_id)
            except StoreUnavailable as e:
                logger.warning(f"Could not discard unused token {token_id}, left to expire: {e.message}")

    async def _persist(self, record: TokenRecord, user_id: str) -> None:
        now = self.clock()
        await self.ledger.put(
            record.access_uuid, user_id, self._remaining(record.access_expires, now)
        )
        # An orphaned access entry after a failed refresh write simply expires
        await self.ledger.put(
            record.refresh_uuid, user_id, self._remaining(record.refresh_expires, now)
        )

    @staticmethod
    def _remaining(expires: int, now: datetime) -> timedelta:
        return datetime.fromtimestamp(expires, UTC) - now
