#!/usr/bin/env python3
"""
authd - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Connects to the session store
3. Builds the token lifecycle stack
4. Listens for auth requests

All business logic is in the modules, following black box principles.
"""

import asyncio
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv
from redis.exceptions import RedisError

from authd.config.provider import ConfigProvider, EnvConfigProvider
from authd.logging_config import configure_logging
from authd.modules.auth import AuthFactory
from authd.modules.dispatch import RequestDispatcher
from authd.modules.storage import InitResult, StorageModule

logger = logging.getLogger("authd.main")


async def connect_with_retry(storage: StorageModule, attempts: int, backoff: float) -> InitResult:
    """
    Connect to the session store, retrying with linear backoff.

    Returns:
        The last InitResult; ok=False if every attempt failed
    """
    result = InitResult(ok=False, error="no connection attempts made")
    for attempt in range(1, max(attempts, 1) + 1):
        result = await storage.connect()
        if result.ok:
            return result
        logger.warning(f"Session store connection attempt {attempt}/{attempts} failed: {result.error}")
        if attempt < attempts:
            await asyncio.sleep(backoff * attempt)
    return result


async def serve(config_provider: Optional[ConfigProvider] = None) -> int:
    """
    Run the auth service until cancelled.

    Returns:
        Process exit code
    """
    config_provider = config_provider or EnvConfigProvider()

    try:
        store_config = config_provider.get_store_config()
        listener_config = config_provider.get_listener_config()
        # Validate token settings before touching the network
        config_provider.get_token_config()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    storage = StorageModule(store_config.address, password=store_config.password)
    init = await connect_with_retry(
        storage,
        attempts=listener_config.connect_attempts,
        backoff=listener_config.connect_backoff_seconds,
    )
    if not init.ok:
        logger.error(f"Giving up on session store at {store_config.address}: {init.error}")
        return 1

    exit_code = 0
    try:
        coordinator = AuthFactory.build(config_provider, init.client)
        dispatcher = RequestDispatcher(
            init.client,
            coordinator,
            channel=listener_config.channel,
            reply_prefix=listener_config.reply_prefix,
        )

        logger.info("authd started")
        await dispatcher.listen()
    except asyncio.CancelledError:
        logger.info("authd shutting down")
    except RedisError as e:
        logger.error(f"Lost connection to session store at {store_config.address}: {e}")
        exit_code = 1
    finally:
        await storage.disconnect()
        logger.info("authd shutdown complete")

    return exit_code


def run() -> None:
    """Console entry point."""
    load_dotenv()
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    try:
        exit_code = asyncio.run(serve())
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
