"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Protocol


@dataclass
class TokenConfig:
    """Token signing configuration."""
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta
    refresh_ttl: timedelta


@dataclass
class StoreConfig:
    """Session store (Redis) configuration."""
    host: str
    port: int
    db: int
    password: Optional[str]
    url: Optional[str] = None

    @property
    def address(self) -> str:
        """Connection URL without credentials."""
        if self.url:
            return self.url
        return f"redis://{self.host}:{self.port}/{self.db}"


@dataclass
class ListenerConfig:
    """Request listener configuration."""
    channel: str
    reply_prefix: str
    connect_attempts: int
    connect_backoff_seconds: float


@dataclass
class CredentialConfig:
    """Password hashing configuration."""
    bcrypt_rounds: int


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_token_config(self) -> TokenConfig:
        """Get token signing configuration."""
        ...

    def get_store_config(self) -> StoreConfig:
        """Get session store configuration."""
        ...

    def get_listener_config(self) -> ListenerConfig:
        """Get request listener configuration."""
        ...

    def get_credential_config(self) -> CredentialConfig:
        """Get password hashing configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def __init__(self, environ: Optional[dict] = None):
        self._env = os.environ if environ is None else environ

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._env.get(key)
        if value is None or value == "":
            return default
        return value

    def get_token_config(self) -> TokenConfig:
        """Get token signing configuration from environment variables."""
        access_secret = self._get("ACCESS_SECRET")
        refresh_secret = self._get("REFRESH_SECRET")

        missing = [
            name
            for name, value in (("ACCESS_SECRET", access_secret), ("REFRESH_SECRET", refresh_secret))
            if not value
        ]
        if missing:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing)}. "
                "Both token signing secrets must be set."
            )
        if access_secret == refresh_secret:
            raise ValueError("ACCESS_SECRET and REFRESH_SECRET must differ")

        access_minutes = int(self._get("ACCESS_TOKEN_TTL_MINUTES", "60"))
        refresh_minutes = int(self._get("REFRESH_TOKEN_TTL_MINUTES", str(60 * 24 * 7)))
        if access_minutes <= 0 or refresh_minutes <= 0:
            raise ValueError("Token TTLs must be positive")

        return TokenConfig(
            access_secret=access_secret,
            refresh_secret=refresh_secret,
            access_ttl=timedelta(minutes=access_minutes),
            refresh_ttl=timedelta(minutes=refresh_minutes),
        )

    def get_store_config(self) -> StoreConfig:
        """Get session store configuration from environment variables."""
        # REDIS_PORT might be in tcp://host:port format from K8s
        port_env = self._get("REDIS_PORT", "6379")
        if port_env.startswith("tcp://"):
            port = int(port_env.split(":")[-1])
        else:
            port = int(port_env)

        return StoreConfig(
            host=self._get("REDIS_HOST", "localhost"),
            port=port,
            db=int(self._get("REDIS_DB", "0")),
            password=self._get("REDIS_PASSWORD"),
            url=self._get("REDIS_URL"),
        )

    def get_listener_config(self) -> ListenerConfig:
        """Get request listener configuration from environment variables."""
        return ListenerConfig(
            channel=self._get("AUTH_CHANNEL", "auth"),
            reply_prefix=self._get("AUTH_REPLY_PREFIX", "auth:reply:"),
            connect_attempts=int(self._get("STORE_CONNECT_ATTEMPTS", "5")),
            connect_backoff_seconds=float(self._get("STORE_CONNECT_BACKOFF", "1.0")),
        )

    def get_credential_config(self) -> CredentialConfig:
        """Get password hashing configuration from environment variables."""
        rounds = int(self._get("BCRYPT_ROUNDS", "4"))
        if not 4 <= rounds <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return CredentialConfig(bcrypt_rounds=rounds)
