"""
Password hashing utilities using bcrypt for secure password storage.
"""

import asyncio
import logging
import re
import uuid

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt's minimum cost; raise via BCRYPT_ROUNDS for production hardware
DEFAULT_ROUNDS = 4

# bcrypt only consumes the first 72 bytes of a secret
MAX_PASSWORD_BYTES = 72

_BCRYPT_HASH = re.compile(r"^\$2[abxy]\$\d{2}\$[./A-Za-z0-9]{53}$")


def is_hashed(value: str) -> bool:
    """Return True if value already looks like a bcrypt hash."""
    return bool(value) and bool(_BCRYPT_HASH.match(value))


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: Plain text password to hash
        rounds: bcrypt cost factor

    Returns:
        Hashed password string

    Raises:
        ValueError: If password is empty or longer than bcrypt accepts
    """
    if not password:
        raise ValueError("Password cannot be empty")

    secret = password.encode("utf-8")
    if len(secret) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password cannot exceed {MAX_PASSWORD_BYTES} bytes")

    hashed = bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(hashed_password: str, plain_password: str) -> bool:
    """
    Verify a plain text password against its stored hash.

    Args:
        hashed_password: Stored hash to verify against
        plain_password: Plain text password submitted by the caller

    Returns:
        True if password matches, False otherwise
    """
    if not plain_password or not hashed_password:
        return False

    if not is_hashed(hashed_password):
        logger.warning("Stored credential is not a bcrypt hash")
        return False

    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        # Oversized secret or corrupt hash body; treat as a mismatch
        logger.warning(f"Password verification rejected input: {e}")
        return False


class CredentialVerifier:
    """
    Hashes and verifies credentials with a fixed cost factor.

    The async variants run bcrypt in a worker thread so the event loop
    stays responsive while a hash is computed.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        # Verified against when no user matches the submitted email
        self.dummy_hash = hash_password(uuid.uuid4().hex, rounds=rounds)

    def hash(self, password: str) -> str:
        return hash_password(password, rounds=self.rounds)

    def verify(self, hashed_password: str, plain_password: str) -> bool:
        return verify_password(hashed_password, plain_password)

    async def hash_async(self, password: str) -> str:
        return await asyncio.to_thread(self.hash, password)

    async def verify_async(self, hashed_password: str, plain_password: str) -> bool:
        return await asyncio.to_thread(self.verify, hashed_password, plain_password)

    async def verify_absent_async(self, plain_password: str) -> bool:
        """Spend one bcrypt check for a caller with no matching user; always False."""
        await self.verify_async(self.dummy_hash, plain_password)
        return False
