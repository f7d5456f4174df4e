"""
Token claim models.

These models define the exact claim shapes carried by access and refresh
tokens. Decoding validates a payload against one of them and rejects any
claim set that is missing a required field.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class TokenKind(str, Enum):
    """Kind of token; selects the signing secret."""

    ACCESS = "access"
    REFRESH = "refresh"


class AccessClaims(BaseModel):
    """Claims asserted by an access token."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    authorized: StrictBool = Field(..., description="Access token grants API actions")
    access_uuid: str = Field(..., min_length=1, description="Access token id")
    user_id: str = Field(..., min_length=1, description="Owning identity")
    exp: int = Field(..., description="Expiration as Unix seconds")

    @property
    def kind(self) -> TokenKind:
        return TokenKind.ACCESS

    @property
    def token_id(self) -> str:
        return self.access_uuid


class RefreshClaims(BaseModel):
    """Claims asserted by a refresh token."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    refresh_uuid: str = Field(..., min_length=1, description="Refresh token id")
    user_id: str = Field(..., min_length=1, description="Owning identity")
    exp: int = Field(..., description="Expiration as Unix seconds")

    @property
    def kind(self) -> TokenKind:
        return TokenKind.REFRESH

    @property
    def token_id(self) -> str:
        return self.refresh_uuid


Claims = Union[AccessClaims, RefreshClaims]

CLAIM_MODELS = {
    TokenKind.ACCESS: AccessClaims,
    TokenKind.REFRESH: RefreshClaims,
}


@dataclass(frozen=True)
class AccessDetails:
    """Access token id and owning identity recovered from an access token."""

    access_uuid: str
    user_id: str

    @classmethod
    def from_claims(cls, claims: AccessClaims) -> "AccessDetails":
        return cls(access_uuid=claims.access_uuid, user_id=claims.user_id)
