"""
Unit tests for the user record stores.
"""

from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError
from redis.exceptions import ConnectionError as RedisConnectionError

from authd.errors import StoreUnavailable, UserExists, UserNotFound
from authd.modules.credentials import hash_password, verify_password
from authd.modules.users import MemoryUserStore, NewUser, RedisUserStore


@pytest.fixture(params=["memory", "redis"])
def store(request, verifier, fake_redis):
    if request.param == "memory":
        return MemoryUserStore(verifier)
    return RedisUserStore(fake_redis, verifier)


@pytest.mark.asyncio
async def test_save_hashes_plaintext(store):
    """Test the write path stores a hash, never the plaintext."""
    record = await store.save(NewUser(email="a@example.com", password="hunter22"))

    assert record.hashed_credential != "hunter22"
    assert verify_password(record.hashed_credential, "hunter22")
    assert len(record.user_id) == 36


@pytest.mark.asyncio
async def test_find_by_email(store):
    """Test a saved user can be found by normalized email."""
    saved = await store.save(NewUser(email="A@Example.com", password="hunter22"))

    found = await store.find_by_email("  a@example.COM ")

    assert found == saved
    assert found.email == "a@example.com"


@pytest.mark.asyncio
async def test_find_unknown_email_raises(store):
    """Test looking up an unknown email fails with UserNotFound."""
    with pytest.raises(UserNotFound):
        await store.find_by_email("nobody@example.com")


@pytest.mark.asyncio
async def test_save_hashes_hash_shaped_password(store):
    """Test a password that looks like a bcrypt hash is still hashed."""
    password = hash_password("other")

    record = await store.save(NewUser(email="a@example.com", password=password))

    assert record.hashed_credential != password
    assert verify_password(record.hashed_credential, password)
    assert not verify_password(record.hashed_credential, "other")


@pytest.mark.asyncio
async def test_update_without_password_keeps_hash(store):
    """Test updating a user without a password leaves the hash untouched."""
    first = await store.save(NewUser(email="a@example.com", password="hunter22"))

    second = await store.save(NewUser(email="a@example.com", user_id=first.user_id))

    assert second.hashed_credential == first.hashed_credential


@pytest.mark.asyncio
async def test_new_user_requires_password(store):
    """Test a new user cannot be saved without a password."""
    with pytest.raises(ValueError):
        await store.save(NewUser(email="a@example.com"))


@pytest.mark.asyncio
async def test_duplicate_email_rejected(store):
    """Test a second registration of the same email is refused."""
    await store.save(NewUser(email="a@example.com", password="hunter22"))

    with pytest.raises(UserExists):
        await store.save(NewUser(email="a@example.com", password="other-pass"))


def test_new_user_rejects_invalid_email():
    """Test email validation on the write model."""
    with pytest.raises(ValidationError):
        NewUser(email="not-an-email", password="hunter22")


@pytest.mark.asyncio
async def test_redis_store_layout(fake_redis, verifier):
    """Test the Redis store writes the expected hash fields."""
    store = RedisUserStore(fake_redis, verifier)

    record = await store.save(NewUser(email="a@example.com", password="hunter22", user_id="user-1"))

    stored = await fake_redis.hgetall("user:email:a@example.com")
    assert stored == {
        "id": "user-1",
        "email": "a@example.com",
        "encrypted_password": record.hashed_credential,
    }


@pytest.mark.asyncio
async def test_redis_store_incomplete_record_is_not_found(fake_redis, verifier):
    """Test a record without a password hash is treated as missing."""
    await fake_redis.hset("user:email:a@example.com", mapping={"id": "user-1"})
    store = RedisUserStore(fake_redis, verifier)

    with pytest.raises(UserNotFound):
        await store.find_by_email("a@example.com")


@pytest.mark.asyncio
async def test_redis_store_unavailable(mock_redis, verifier):
    """Test connection failures surface as StoreUnavailable."""
    mock_redis.hgetall = AsyncMock(side_effect=RedisConnectionError("refused"))
    store = RedisUserStore(mock_redis, verifier)

    with pytest.raises(StoreUnavailable):
        await store.find_by_email("a@example.com")
