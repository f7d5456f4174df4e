"""
Token codec: signs claim sets into JWTs and verifies them back.

The verification key is always chosen from the token kind the caller
expects, never from anything inside the token itself.
"""

import logging
from typing import Any, Dict, Optional

import jwt
from pydantic import ValidationError

from ...errors import InvalidSignature, MalformedToken, TokenEncodeError, TokenExpired
from .claims import CLAIM_MODELS, AccessClaims, Claims, RefreshClaims, TokenKind

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def encode(claims: Claims, secret: str) -> str:
    """
    Sign a claim set with the given secret.

    Args:
        claims: Access or refresh claims
        secret: HMAC signing key

    Returns:
        Compact JWT string

    Raises:
        TokenEncodeError: If the claims cannot be serialized or signed
    """
    payload: Dict[str, Any] = claims.model_dump()
    try:
        return jwt.encode(payload, secret, algorithm=ALGORITHM)
    except (TypeError, ValueError, jwt.PyJWTError) as e:
        logger.error(f"Failed to encode {claims.kind.value} token: {e}")
        raise TokenEncodeError(f"Could not encode {claims.kind.value} token") from e


def decode(token: str, secret: str, kind: TokenKind) -> Claims:
    """
    Verify a token's signature and expiration and return its claims.

    Args:
        token: Compact JWT string
        secret: HMAC key for the expected token kind
        kind: Expected token kind; selects the claim model

    Returns:
        AccessClaims or RefreshClaims, depending on kind

    Raises:
        InvalidSignature: Signature mismatch or algorithm other than HS256
        TokenExpired: Embedded expiration has elapsed
        MalformedToken: Unparsable token or missing/mistyped claims
    """
    if not token:
        raise MalformedToken("Token is empty")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp"], "verify_signature": True, "verify_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired(f"{kind.value} token has expired") from e
    except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
        raise InvalidSignature(f"{kind.value} token signature rejected: {e}") from e
    except jwt.InvalidTokenError as e:
        raise MalformedToken(f"{kind.value} token could not be parsed: {e}") from e

    try:
        return CLAIM_MODELS[kind].model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedToken(
            f"{kind.value} token claims are invalid",
            detail={"fields": fields},
        ) from e


class TokenCodec:
    """
    Encodes and decodes tokens with one distinct secret per token kind.

    Possession of one secret can never forge a token of the other kind.
    """

    def __init__(self, access_secret: str, refresh_secret: str):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")
        self._secrets = {
            TokenKind.ACCESS: access_secret,
            TokenKind.REFRESH: refresh_secret,
        }

    def encode(self, claims: Claims) -> str:
        return encode(claims, self._secrets[claims.kind])

    def decode(self, token: Optional[str], kind: TokenKind) -> Claims:
        return decode(token or "", self._secrets[kind], kind)

    def decode_access(self, token: Optional[str]) -> AccessClaims:
        return self.decode(token, TokenKind.ACCESS)

    def decode_refresh(self, token: Optional[str]) -> RefreshClaims:
        return self.decode(token, TokenKind.REFRESH)
