"""
Tokens Module - Black Box Interface

Purpose: Mint, sign and verify access/refresh token pairs
Interface: TokenCodec, TokenMinter, AccessClaims, RefreshClaims
Hidden: JWT encoding, signing algorithm, claim serialization

Replaceable with any signed token format carrying the same claim sets.
"""

from .claims import AccessClaims, AccessDetails, Claims, RefreshClaims, TokenKind
from .codec import TokenCodec
from .minter import TokenMinter, TokenRecord

__all__ = [
    "AccessClaims",
    "AccessDetails",
    "Claims",
    "RefreshClaims",
    "TokenCodec",
    "TokenKind",
    "TokenMinter",
    "TokenRecord",
]
