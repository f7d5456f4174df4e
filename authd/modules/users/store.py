import logging
import uuid
from typing import Dict, Optional

from redis.exceptions import RedisError

from ...errors import StoreUnavailable, UserExists, UserNotFound
from ..credentials import CredentialVerifier
from .models import NewUser, UserRecord, normalize_email

logger = logging.getLogger(__name__)


async def _resolve_credential(
    verifier: CredentialVerifier,
    new_user: NewUser,
    existing: Optional[UserRecord],
) -> str:
    """Hash a submitted plaintext password; keep the stored hash otherwise."""
    if new_user.password:
        return await verifier.hash_async(new_user.password)

    if existing is None:
        raise ValueError("A password is required for a new user")
    return existing.hashed_credential


def _check_identity(new_user: NewUser, existing: Optional[UserRecord]) -> str:
    if existing is None:
        return new_user.user_id or str(uuid.uuid4())
    if new_user.user_id != existing.user_id:
        raise UserExists(f"User already registered: {new_user.email}")
    return existing.user_id


class RedisUserStore:
    def __init__(self, redis_client, verifier: CredentialVerifier, key_prefix: str = "user:email:"):
        """
        Initialize Redis-backed user store.

        Args:
            redis_client: Async Redis client
            verifier: Credential verifier used to hash passwords on save
            key_prefix: Namespace for user hashes keyed by email
        """
        self.redis = redis_client
        self.verifier = verifier
        self.key_prefix = key_prefix

    def _key(self, email: str) -> str:
        return f"{self.key_prefix}{normalize_email(email)}"

    async def _load(self, email: str) -> Optional[UserRecord]:
        try:
            data = await self.redis.hgetall(self._key(email))
        except RedisError as e:
            logger.error(f"Failed to read user record: {e}")
            raise StoreUnavailable("User store read failed") from e

        if not data:
            return None

        data = {
            (k.decode("utf-8") if isinstance(k, bytes) else k): (
                v.decode("utf-8") if isinstance(v, bytes) else v
            )
            for k, v in data.items()
        }
        if not data.get("id") or not data.get("encrypted_password"):
            logger.warning("User record is missing id or encrypted_password")
            return None

        return UserRecord(
            user_id=data["id"],
            email=data.get("email", normalize_email(email)),
            hashed_credential=data["encrypted_password"],
        )

    async def find_by_email(self, email: str) -> UserRecord:
        record = await self._load(email)
        if record is None:
            raise UserNotFound("No user with that email")
        return record

    async def save(self, new_user: NewUser) -> UserRecord:
        existing = await self._load(new_user.email)
        user_id = _check_identity(new_user, existing)
        hashed = await _resolve_credential(self.verifier, new_user, existing)

        record = UserRecord(user_id=user_id, email=new_user.email, hashed_credential=hashed)
        try:
            await self.redis.hset(
                self._key(new_user.email),
                mapping={
                    "id": record.user_id,
                    "email": record.email,
                    "encrypted_password": record.hashed_credential,
                },
            )
        except RedisError as e:
            logger.error(f"Failed to write user record: {e}")
            raise StoreUnavailable("User store write failed") from e

        return record


class MemoryUserStore:
    """In-process user store for tests and local runs."""

    def __init__(self, verifier: CredentialVerifier):
        self.verifier = verifier
        self._users: Dict[str, UserRecord] = {}

    async def find_by_email(self, email: str) -> UserRecord:
        record = self._users.get(normalize_email(email))
        if record is None:
            raise UserNotFound("No user with that email")
        return record

    async def save(self, new_user: NewUser) -> UserRecord:
        existing = self._users.get(new_user.email)
        user_id = _check_identity(new_user, existing)
        hashed = await _resolve_credential(self.verifier, new_user, existing)

        record = UserRecord(user_id=user_id, email=new_user.email, hashed_credential=hashed)
        self._users[new_user.email] = record
        return record
