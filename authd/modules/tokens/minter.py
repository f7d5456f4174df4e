import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, Dict

from .claims import AccessClaims, RefreshClaims
from .codec import TokenCodec

DEFAULT_ACCESS_TTL = timedelta(minutes=60)
DEFAULT_REFRESH_TTL = timedelta(days=7)


def now_utc() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class TokenRecord:
    """A matched access/refresh token pair with their ids and expiries."""

    access_token: str
    refresh_token: str
    access_uuid: str
    refresh_uuid: str
    access_expires: int
    refresh_expires: int

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


class TokenMinter:
    def __init__(
        self,
        codec: TokenCodec,
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        clock: Callable[[], datetime] = now_utc,
    ):
        """
        Initialize token minter.

        Args:
            codec: Codec holding the per-kind signing secrets
            access_ttl: Access token lifetime (60 minutes)
            refresh_ttl: Refresh token lifetime (7 days)
            clock: Source of the current time
        """
        self.codec = codec
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    def mint(self, user_id: str) -> TokenRecord:
        """
        Mint an access/refresh token pair for a user.

        Args:
            user_id: Owning identity

        Returns:
            TokenRecord with both signed tokens

        Raises:
            TokenEncodeError: If either token cannot be signed
        """
        now = self.clock()
        access_uuid = str(uuid.uuid4())
        refresh_uuid = str(uuid.uuid4())
        access_expires = int((now + self.access_ttl).timestamp())
        refresh_expires = int((now + self.refresh_ttl).timestamp())

        access_token = self.codec.encode(
            AccessClaims(
                authorized=True,
                access_uuid=access_uuid,
                user_id=user_id,
                exp=access_expires,
            )
        )
        refresh_token = self.codec.encode(
            RefreshClaims(
                refresh_uuid=refresh_uuid,
                user_id=user_id,
                exp=refresh_expires,
            )
        )

        return TokenRecord(
            access_token=access_token,
            refresh_token=refresh_token,
            access_uuid=access_uuid,
            refresh_uuid=refresh_uuid,
            access_expires=access_expires,
            refresh_expires=refresh_expires,
        )
