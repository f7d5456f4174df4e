"""
Storage Module - Black Box Interface

Purpose: Own the session store connection
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


@dataclass
class InitResult:
    """Outcome of connecting to the store."""
    ok: bool
    client: Optional[Any] = None
    error: Optional[str] = None


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: str, password: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url
        self.password = password
        self._client = None

    async def connect(self) -> InitResult:
        """
        Open and verify the store connection.

        Returns:
            InitResult with the client on success, or the error on failure
        """
        if self._client:
            return InitResult(ok=True, client=self._client)

        # Password passed separately to avoid URL encoding issues
        client = redis.from_url(
            self.url,
            password=self.password,
            encoding="utf-8",
            decode_responses=True,
        )
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.error(f"Could not connect to session store at {self.url}: {e}")
            await client.aclose()
            return InitResult(ok=False, error=str(e))

        self._client = client
        logger.info(f"Connected to session store at {self.url}")
        return InitResult(ok=True, client=client)

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.warning(f"Error closing session store connection: {e}")
            self._client = None


__all__ = ["InitResult", "StorageModule"]
