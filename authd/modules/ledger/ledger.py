import logging
from datetime import timedelta
from typing import Optional

from redis.exceptions import RedisError

from ...errors import SessionNotFound, StoreUnavailable

logger = logging.getLogger(__name__)


class SessionLedger:
    def __init__(self, redis_client, key_prefix: str = "auth:token:"):
        """
        Initialize session ledger.

        Args:
            redis_client: Async Redis client
            key_prefix: Namespace for token id keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, token_id: str) -> str:
        return f"{self.key_prefix}{token_id}"

    async def put(self, token_id: str, user_id: str, ttl: timedelta) -> None:
        """
        Record a live token id for a user.

        Args:
            token_id: Token id embedded in the token's claims
            user_id: Owning identity
            ttl: Remaining token lifetime; the store expires the entry

        Raises:
            ValueError: If ttl is not positive
            StoreUnavailable: On connection or write failure
        """
        ttl_ms = int(ttl.total_seconds() * 1000)
        if ttl_ms <= 0:
            raise ValueError(f"Ledger TTL must be positive, got {ttl}")

        try:
            await self.redis.set(self._key(token_id), user_id, px=ttl_ms)
        except RedisError as e:
            logger.error(f"Failed to record token {token_id}: {e}")
            raise StoreUnavailable("Session store write failed") from e

    async def get(self, token_id: str) -> str:
        """
        Look up the identity owning a live token id.

        Args:
            token_id: Token id

        Returns:
            Owning identity

        Raises:
            SessionNotFound: If the entry is absent, revoked or expired
            StoreUnavailable: On connection or read failure
        """
        try:
            user_id = await self.redis.get(self._key(token_id))
        except RedisError as e:
            logger.error(f"Failed to look up token {token_id}: {e}")
            raise StoreUnavailable("Session store read failed") from e

        if user_id is None:
            raise SessionNotFound(f"No live session for token {token_id}")

        return user_id.decode("utf-8") if isinstance(user_id, bytes) else user_id

    async def delete(self, token_id: str) -> int:
        """
        Revoke a token id. Removing an absent id is not an error.

        Args:
            token_id: Token id

        Returns:
            Number of entries removed (0 or 1)

        Raises:
            StoreUnavailable: On connection or delete failure
        """
        try:
            return int(await self.redis.delete(self._key(token_id)))
        except RedisError as e:
            logger.error(f"Failed to revoke token {token_id}: {e}")
            raise StoreUnavailable("Session store delete failed") from e

    async def ttl(self, token_id: str) -> Optional[timedelta]:
        """
        Remaining lifetime of a token id's entry.

        Returns:
            Remaining TTL, or None if the entry does not exist
        """
        try:
            remaining_ms = await self.redis.pttl(self._key(token_id))
        except RedisError as e:
            raise StoreUnavailable("Session store read failed") from e

        # -2: no such key, -1: key without expiry
        if remaining_ms is None or remaining_ms == -2:
            return None
        if remaining_ms == -1:
            logger.warning(f"Token {token_id} has no expiry in the session store")
            return None
        return timedelta(milliseconds=remaining_ms)
