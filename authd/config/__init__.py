"""Configuration for authd."""

from .provider import (
    ConfigProvider,
    CredentialConfig,
    EnvConfigProvider,
    ListenerConfig,
    StoreConfig,
    TokenConfig,
)

__all__ = [
    "ConfigProvider",
    "CredentialConfig",
    "EnvConfigProvider",
    "ListenerConfig",
    "StoreConfig",
    "TokenConfig",
]
