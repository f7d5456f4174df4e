"""
Shared pytest fixtures for authd tests.

This module provides common fixtures including:
- FakeRedis: in-memory async Redis stand-in with PX expiry and a manual clock
- Redis mocks for failure injection
- A fully wired AuthCoordinator over the fakes
"""

import json
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from authd.config.provider import EnvConfigProvider
from authd.modules.auth import AuthFactory
from authd.modules.credentials import CredentialVerifier
from authd.modules.tokens import TokenCodec
from authd.modules.users import MemoryUserStore, NewUser

ACCESS_SECRET = "access-secret-for-tests-0123456789abcdef"
REFRESH_SECRET = "refresh-secret-for-tests-fedcba9876543210"

TEST_ENV = {
    "ACCESS_SECRET": ACCESS_SECRET,
    "REFRESH_SECRET": REFRESH_SECRET,
    "BCRYPT_ROUNDS": "4",
}


# =============================================================================
# Redis Fakes
# =============================================================================

class FakePubSub:
    """Pub/sub stand-in that replays a fixed list of messages."""

    def __init__(self, messages: List[Any], error: Optional[Exception] = None):
        self._messages = messages
        self._error = error
        self.subscribed: List[str] = []
        self.closed = False

    async def subscribe(self, *channels):
        self.subscribed.extend(channels)

    async def unsubscribe(self, *channels):
        for channel in channels:
            if channel in self.subscribed:
                self.subscribed.remove(channel)

    async def listen(self):
        for channel in self.subscribed:
            yield {"type": "subscribe", "channel": channel, "data": 1}
        for data in self._messages:
            yield {"type": "message", "channel": self.subscribed[0], "data": data}
        if self._error is not None:
            raise self._error

    async def aclose(self):
        self.closed = True


class FakeRedis:
    """
    In-memory async Redis with per-key expiry for realistic ledger tests.

    Time only moves when advance() is called, so expiry is deterministic.
    """

    def __init__(self):
        self.now_ms = 0
        self._data: Dict[str, Tuple[Any, Optional[int]]] = {}
        self.published: List[Tuple[str, str]] = []
        self.pubsub_messages: List[Any] = []
        self.pubsub_error: Optional[Exception] = None
        self.last_pubsub: Optional[FakePubSub] = None

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)

    def _entry(self, key: str):
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and expires_at <= self.now_ms:
            del self._data[key]
            return None
        return entry

    async def ping(self):
        return True

    async def set(self, key, value, px=None, ex=None):
        expires_at = None
        if px is not None:
            expires_at = self.now_ms + int(px)
        elif ex is not None:
            expires_at = self.now_ms + int(ex) * 1000
        self._data[key] = (str(value), expires_at)
        return True

    async def get(self, key):
        entry = self._entry(key)
        return entry[0] if entry else None

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self._entry(key) is not None:
                del self._data[key]
                removed += 1
        return removed

    async def pttl(self, key):
        entry = self._entry(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return entry[1] - self.now_ms

    async def hset(self, key, mapping=None, **kwargs):
        entry = self._entry(key)
        current = dict(entry[0]) if entry else {}
        current.update({k: str(v) for k, v in (mapping or {}).items()})
        self._data[key] = (current, None)
        return len(mapping or {})

    async def hgetall(self, key):
        entry = self._entry(key)
        return dict(entry[0]) if entry else {}

    async def publish(self, channel, message):
        self.published.append((channel, message))
        return 1

    def pubsub(self):
        self.last_pubsub = FakePubSub(list(self.pubsub_messages), self.pubsub_error)
        return self.last_pubsub

    def replies(self) -> List[dict]:
        return [json.loads(message) for _, message in self.published]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def mock_redis():
    """Create a mock Redis client for failure injection."""
    redis = AsyncMock()
    redis.set = AsyncMock(return_value=True)
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock(return_value=0)
    redis.pttl = AsyncMock(return_value=-2)
    redis.hgetall = AsyncMock(return_value={})
    redis.hset = AsyncMock(return_value=1)
    redis.publish = AsyncMock(return_value=1)
    return redis


# =============================================================================
# Auth Stack
# =============================================================================

@pytest.fixture
def config_provider():
    return EnvConfigProvider(environ=dict(TEST_ENV))


@pytest.fixture
def codec():
    return TokenCodec(ACCESS_SECRET, REFRESH_SECRET)


@pytest.fixture
def verifier():
    return CredentialVerifier(rounds=4)


@pytest_asyncio.fixture
async def user_store(verifier):
    store = MemoryUserStore(verifier)
    await store.save(
        NewUser(
            email="u1@example.com",
            password="correct horse battery staple",
            user_id="3f1c2a9e-0d4b-4c52-9a57-1b2f9c6e7d10",
        )
    )
    return store


class FrozenClock:
    """Clock that returns a fixed instant until moved."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime.now(UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def coordinator(config_provider, fake_redis, user_store, clock):
    return AuthFactory.build(config_provider, fake_redis, user_store=user_store, clock=clock)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
