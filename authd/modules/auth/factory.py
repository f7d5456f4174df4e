"""
Authentication Factory following Black Box Design principles.

This factory:
- Constructs the token lifecycle stack based on configuration
- Wires dependencies together
- Returns only the coordinator (hiding implementation)
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ...config.provider import ConfigProvider
from ..credentials import CredentialVerifier
from ..ledger import SessionLedger
from ..tokens import TokenCodec, TokenMinter
from ..tokens.minter import now_utc
from ..users import RedisUserStore, UserRecordStore
from .coordinator import AuthCoordinator

logger = logging.getLogger(__name__)


class AuthFactory:
    """
    Factory for building the token lifecycle stack.

    This is the composition root that:
    - Creates all auth components
    - Wires them together via dependency injection
    - Returns only the public interface
    """

    @staticmethod
    def build(
        config_provider: ConfigProvider,
        redis_client: Any,
        user_store: Optional[UserRecordStore] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> AuthCoordinator:
        """
        Build the complete token lifecycle stack.

        Args:
            config_provider: Configuration provider
            redis_client: Async Redis client backing the session ledger
            user_store: User record store; defaults to a Redis-backed store
            clock: Source of the current time

        Returns:
            AuthCoordinator wired to the configured modules
        """
        token_config = config_provider.get_token_config()
        credential_config = config_provider.get_credential_config()

        verifier = CredentialVerifier(rounds=credential_config.bcrypt_rounds)
        codec = TokenCodec(token_config.access_secret, token_config.refresh_secret)
        minter = TokenMinter(
            codec,
            access_ttl=token_config.access_ttl,
            refresh_ttl=token_config.refresh_ttl,
            clock=clock,
        )
        ledger = SessionLedger(redis_client)

        if user_store is None:
            logger.info("Using Redis-backed user record store")
            user_store = RedisUserStore(redis_client, verifier)

        logger.info(
            f"Token lifecycle stack built (access ttl={token_config.access_ttl}, "
            f"refresh ttl={token_config.refresh_ttl})"
        )
        return AuthCoordinator(
            user_store=user_store,
            verifier=verifier,
            minter=minter,
            codec=codec,
            ledger=ledger,
            clock=clock,
        )
